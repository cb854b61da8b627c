from __future__ import annotations

"""
Request signer
==============

Builds ready-to-send request descriptors for the Bitforex REST API.

Public calls: `<api-base>/api/<version>/<path>?<sorted urlencoded params>`.

Private calls, in this exact order:
1. nonce = wall-clock milliseconds as a string
2. merge {accessKey, nonce} with the caller's params (caller wins), sort by key
3. raw-encode (`k=v&...`, no escaping) and append to `/api/<version>/<path>`
4. signData = hex(HMAC-SHA256(secret, that relative URL))
5. append `&signData=<digest>` and prefix the api base

The digest is computed before it is appended and never covers itself; the
venue recomputes it over the same relative URL.
"""

import logging
import re
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlencode

from bitforex_connector.common.decimal_utils import wire_value
from bitforex_connector.exchange.common import SignedRequest, hmac_sha256, milliseconds
from bitforex_connector.exchange.config import Credentials

logger = logging.getLogger(__name__)

PUBLIC = "public"
PRIVATE = "private"

_SECRET_PARAMS = re.compile(r"(accessKey|signData)=[^&]*")


def keysort(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: params[k] for k in sorted(params)}


def rawencode(params: Mapping[str, Any]) -> str:
    """`k=v` pairs joined by '&' in mapping order, values left unescaped."""
    return "&".join(f"{k}={wire_value(v)}" for k, v in params.items())


def sorted_urlencode(params: Mapping[str, Any]) -> str:
    return urlencode([(k, wire_value(v)) for k, v in keysort(params).items()])


def redact_url(url: str) -> str:
    """Mask credentials and signatures for log output."""
    return _SECRET_PARAMS.sub(lambda m: f"{m.group(1)}=***", url)


class RequestSigner:
    def __init__(
        self,
        *,
        api_base: str,
        version: str,
        credentials: Credentials,
        clock: Callable[[], int] = milliseconds,
        hasher: Callable[[str, str], str] = hmac_sha256,
    ) -> None:
        self._base = api_base.rstrip("/")
        self._version = version
        self._creds = credentials
        self._clock = clock
        self._hasher = hasher

    def path_url(self, path: str) -> str:
        return f"/api/{self._version}/{path}"

    def nonce(self) -> str:
        return str(self._clock())

    def signed_query(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Sorted private query without signData."""
        query: Dict[str, Any] = {"accessKey": self._creds.api_key, "nonce": self.nonce()}
        query.update(params or {})
        return keysort(query)

    def sign(
        self,
        path: str,
        api: str = PUBLIC,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> SignedRequest:
        url = self.path_url(path)
        params = params or {}
        if api == PRIVATE:
            self._creds.require(operation=path)
            url += "?" + rawencode(self.signed_query(params))
            signature = self._hasher(self._creds.api_secret, url)
            url += "&signData=" + signature
        elif api == PUBLIC:
            if params:
                url += "?" + sorted_urlencode(params)
        else:
            raise ValueError(f"Unknown api section: {api}")
        request = SignedRequest(url=self._base + url, method=method, body=body, headers=headers)
        logger.debug(f"{method} {redact_url(request.url)}")
        return request


__all__ = [
    "PUBLIC",
    "PRIVATE",
    "keysort",
    "rawencode",
    "sorted_urlencode",
    "redact_url",
    "RequestSigner",
]
