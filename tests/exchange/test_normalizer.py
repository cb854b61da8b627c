from __future__ import annotations

import math

import pytest

from bitforex_connector.exchange.catalog import MarketCatalog, parse_market, parse_markets
from bitforex_connector.exchange.common import MalformedResponse, OrderStatus, Side
from bitforex_connector.exchange.normalizer import (
    order_cost,
    parse_balance,
    parse_order,
    parse_order_book,
    parse_order_status,
    parse_side,
    parse_ticker,
    side_to_trade_type,
)
from tests.fixtures.bitforex_fakes import (
    ALL_ACCOUNT_RESPONSE,
    DEPTH_RESPONSE,
    NOW_MS,
    ORDER_INFO_RESPONSE,
    SYMBOLS_RESPONSE,
    TICKER_RESPONSE,
)

BTC_USDT = parse_market({"symbol": "coin-usdt-btc"})


# --------------------------- ticker ---------------------------


def test_parse_ticker_maps_fields():
    t = parse_ticker(TICKER_RESPONSE["data"], BTC_USDT)
    assert t.symbol == "BTC/USDT"
    assert t.ask == 7622.0
    assert t.bid == 7621.5
    assert t.high == 7700.0
    assert t.low == 7500.25
    assert t.last == 7621.7
    assert t.volume == 1234.5
    assert t.timestamp == NOW_MS
    assert t.datetime == "2018-07-19T11:33:20.000Z"
    assert t.raw is TICKER_RESPONSE["data"]


def test_parse_ticker_permissive_and_symbol_unset():
    t = parse_ticker({"sell": "n/a", "buy": None, "vol": ""})
    assert t.symbol is None
    assert t.ask is None
    assert t.bid is None
    assert t.volume is None
    assert t.timestamp is None
    assert t.datetime is None


# --------------------------- status / side ---------------------------


@pytest.mark.parametrize(
    "code,expected",
    [
        (0, OrderStatus.OPEN),
        (1, OrderStatus.OPEN),
        (2, OrderStatus.CLOSED),
        (3, OrderStatus.OPEN),
        (4, OrderStatus.CANCELED),
    ],
)
def test_order_status_table(code, expected):
    assert parse_order_status(code) is expected


def test_order_status_unknown_passes_through():
    assert parse_order_status(99) == 99
    assert parse_order_status("weird") == "weird"
    assert parse_order_status(None) is None


def test_order_status_accepts_numeric_strings():
    assert parse_order_status("2") is OrderStatus.CLOSED


def test_side_translation():
    assert parse_side(2) is Side.SELL
    assert parse_side("2") is Side.SELL
    assert parse_side(1) is Side.BUY
    assert parse_side(None) is Side.BUY
    assert side_to_trade_type("sell") == 2
    assert side_to_trade_type("buy") == 1
    assert side_to_trade_type(Side.SELL) == 2


# --------------------------- orders ---------------------------


def test_parse_order_cost_invariant():
    o = parse_order(ORDER_INFO_RESPONSE["data"], BTC_USDT)
    assert o.filled == 2.5
    assert o.price == 100.0
    assert o.cost == 250.0
    assert o.average == 101.2
    assert o.amount == 4.0
    assert o.fee == 0.125
    assert o.side is Side.SELL
    assert o.status is OrderStatus.OPEN
    assert o.id == "42"
    assert o.timestamp == NOW_MS
    assert o.datetime == "2018-07-19T11:33:20.000Z"


def test_parse_order_cost_ignores_average_price():
    payload = dict(ORDER_INFO_RESPONSE["data"], avgPrice=90)
    assert parse_order(payload, BTC_USDT).cost == 250.0


def test_parse_order_missing_price_does_not_raise():
    payload = dict(ORDER_INFO_RESPONSE["data"])
    del payload["orderPrice"]
    o = parse_order(payload, BTC_USDT)
    assert o.price is None
    assert o.cost is None
    assert o.filled == 2.5


def test_parse_order_malformed_filled_yields_no_cost():
    payload = dict(ORDER_INFO_RESPONSE["data"], dealAmount="??")
    o = parse_order(payload, BTC_USDT)
    assert o.filled is None
    assert o.cost is None


def test_order_cost_helper():
    assert order_cost(2.5, 100.0) == 250.0
    assert order_cost(None, 100.0) is None
    assert order_cost(2.5, None) is None
    assert not math.isnan(order_cost(0.0, 0.0))


def test_parse_order_resolves_symbol_through_catalog():
    catalog = MarketCatalog(parse_markets(SYMBOLS_RESPONSE["data"]))
    assert parse_order(ORDER_INFO_RESPONSE["data"], catalog=catalog).symbol == "BTC/USDT"


def test_parse_order_unknown_venue_symbol_leaves_symbol_unset():
    catalog = MarketCatalog(parse_markets(SYMBOLS_RESPONSE["data"]))
    payload = dict(ORDER_INFO_RESPONSE["data"], symbol="coin-usdt-zzz")
    assert parse_order(payload, catalog=catalog).symbol is None
    assert parse_order(payload).symbol is None


def test_parse_order_requires_state_code():
    payload = dict(ORDER_INFO_RESPONSE["data"])
    del payload["orderState"]
    with pytest.raises(MalformedResponse) as exc:
        parse_order(payload, BTC_USDT)
    assert exc.value.argument == "orderState"


def test_parse_order_requires_symbol_when_no_market_given():
    payload = dict(ORDER_INFO_RESPONSE["data"])
    del payload["symbol"]
    with pytest.raises(MalformedResponse) as exc:
        parse_order(payload)
    assert exc.value.argument == "symbol"
    # a supplied market makes the payload symbol unnecessary
    assert parse_order(payload, BTC_USDT).symbol == "BTC/USDT"


def test_parse_order_unknown_status_passes_through():
    payload = dict(ORDER_INFO_RESPONSE["data"], orderState=99)
    assert parse_order(payload, BTC_USDT).status == 99


# --------------------------- balance / book ---------------------------


def test_parse_balance():
    b = parse_balance(ALL_ACCOUNT_RESPONSE["data"])
    assert "USDT" in b
    assert b["USDT"].free == 1000.5
    assert b["USDT"].used == 20.0
    assert b["USDT"].total == 1020.5
    assert b["BTC"].total == 0.5


def test_parse_balance_rejects_non_list():
    with pytest.raises(MalformedResponse):
        parse_balance({"currency": "usdt"})


def test_parse_order_book_sorted():
    book = parse_order_book(DEPTH_RESPONSE["data"], BTC_USDT, NOW_MS)
    assert book.symbol == "BTC/USDT"
    assert book.bids == [(7621.0, 0.2), (7620.0, 1.5)]
    assert book.asks == [(7622.0, 2.0), (7623.0, 0.7)]
    assert book.timestamp == NOW_MS


def test_parse_order_book_skips_bad_levels():
    book = parse_order_book({"bids": [{"price": "x", "amount": 1}, {"price": 1, "amount": 1}], "asks": None})
    assert book.bids == [(1.0, 1.0)]
    assert book.asks == []
    assert book.symbol is None
