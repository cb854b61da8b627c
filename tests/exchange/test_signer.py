from __future__ import annotations

import hashlib
import hmac

import pytest

from bitforex_connector.exchange.common import CredentialsRequired
from bitforex_connector.exchange.config import Credentials
from bitforex_connector.exchange.signer import (
    PRIVATE,
    PUBLIC,
    RequestSigner,
    keysort,
    rawencode,
    redact_url,
    sorted_urlencode,
)

NONCE = 1532000000000
BASE = "https://api.bitforex.com"


def make_signer(key="key", secret="secret", hasher=None):
    kwargs = {}
    if hasher is not None:
        kwargs["hasher"] = hasher
    return RequestSigner(
        api_base=BASE + "/",
        version="v1",
        credentials=Credentials(api_key=key, api_secret=secret),
        clock=lambda: NONCE,
        **kwargs,
    )


def expected_digest(secret: str, msg: str) -> str:
    return hmac.new(secret.encode("utf-8"), msg.encode("utf-8"), hashlib.sha256).hexdigest()


def test_public_url_without_params():
    req = make_signer().sign("market/symbols")
    assert req.url == f"{BASE}/api/v1/market/symbols"
    assert req.method == "GET"
    assert req.body is None and req.headers is None


def test_public_url_sorted_and_escaped():
    req = make_signer().sign("market/depth", PUBLIC, params={"symbol": "coin-usdt-btc", "size": 5})
    assert req.url == f"{BASE}/api/v1/market/depth?size=5&symbol=coin-usdt-btc"
    spaced = make_signer().sign("market/ticker", PUBLIC, params={"symbol": "a b&c"})
    assert spaced.url.endswith("?symbol=a+b%26c")


def test_private_url_two_pass_signature():
    params = {"symbol": "coin-usdt-btc", "tradeType": 2, "price": 7000.5, "amount": 0.00001}
    req = make_signer().sign("trade/placeOrder", PRIVATE, "POST", params)
    pre = (
        "/api/v1/trade/placeOrder?accessKey=key&amount=0.00001&nonce=1532000000000"
        "&price=7000.5&symbol=coin-usdt-btc&tradeType=2"
    )
    assert req.url == f"{BASE}{pre}&signData={expected_digest('secret', pre)}"
    assert req.method == "POST"


def test_private_query_independent_of_insertion_order():
    a = {"symbol": "coin-usdt-btc", "orderId": "42"}
    b = {"orderId": "42", "symbol": "coin-usdt-btc"}
    s = make_signer()
    assert s.sign("trade/orderInfo", PRIVATE, "POST", a).url == s.sign("trade/orderInfo", PRIVATE, "POST", b).url
    assert list(s.signed_query(b)) == ["accessKey", "nonce", "orderId", "symbol"]


def test_signature_never_covers_itself():
    seen = []

    def recording_hasher(secret, msg):
        seen.append((secret, msg))
        return "deadbeef"

    req = make_signer(hasher=recording_hasher).sign("fund/allAccount", PRIVATE, "POST", {})
    assert len(seen) == 1
    secret, msg = seen[0]
    assert secret == "secret"
    assert "signData" not in msg
    assert msg == "/api/v1/fund/allAccount?accessKey=key&nonce=1532000000000"
    assert req.url == f"{BASE}{msg}&signData=deadbeef"
    assert req.url.count("signData=") == 1


def test_caller_params_override_defaults():
    q = make_signer().signed_query({"nonce": "1"})
    assert q["nonce"] == "1"
    assert q["accessKey"] == "key"


@pytest.mark.parametrize("key,secret,missing", [("", "secret", "api_key"), ("key", "", "api_secret")])
def test_private_requires_credentials(key, secret, missing):
    with pytest.raises(CredentialsRequired) as exc:
        make_signer(key=key, secret=secret).sign("trade/placeOrder", PRIVATE, "POST", {})
    assert exc.value.argument == missing


def test_unknown_api_section():
    with pytest.raises(ValueError):
        make_signer().sign("market/symbols", "internal")


def test_encoding_helpers():
    assert list(keysort({"b": 1, "a": 2, "C": 3})) == ["C", "a", "b"]
    assert rawencode({"a": "x y", "b": 1.0}) == "a=x y&b=1"
    assert sorted_urlencode({"b": 1, "a": "x y"}) == "a=x+y&b=1"


def test_redact_url_masks_secrets():
    url = f"{BASE}/api/v1/fund/allAccount?accessKey=key&nonce=1&signData=abc"
    assert redact_url(url) == f"{BASE}/api/v1/fund/allAccount?accessKey=***&nonce=1&signData=***"
