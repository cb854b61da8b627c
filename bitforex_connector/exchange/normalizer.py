from __future__ import annotations

"""
Response normalizer
===================

Pure functions turning raw Bitforex payloads into canonical records.

Parsing policy:
- Optional numeric fields are parsed permissively: absent or malformed -> None
- Structurally required fields (order state code, the symbol used for catalog
  lookup) raise MalformedResponse when missing
- Unknown order state codes pass through unchanged
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from bitforex_connector.common.decimal_utils import (
    iso8601,
    safe_float,
    safe_integer,
    to_float,
    to_int,
)
from bitforex_connector.exchange.catalog import MarketCatalog
from bitforex_connector.exchange.common import (
    Balance,
    BalanceEntry,
    MalformedResponse,
    Market,
    Order,
    OrderBook,
    OrderStatus,
    Side,
    StatusLike,
    Ticker,
)

# orderState -> canonical status
ORDER_STATUS: Dict[int, OrderStatus] = {
    0: OrderStatus.OPEN,  # not closed
    1: OrderStatus.OPEN,  # partial transaction
    2: OrderStatus.CLOSED,  # all transaction
    3: OrderStatus.OPEN,  # partial deal, canceled
    4: OrderStatus.CANCELED,  # all revoked
}

SELL_TRADE_TYPE = 2
BUY_TRADE_TYPE = 1


def parse_ticker(ticker: Mapping[str, Any], market: Optional[Market] = None) -> Ticker:
    timestamp = safe_integer(ticker, "date")
    return Ticker(
        symbol=market.symbol if market is not None else None,
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        ask=safe_float(ticker, "sell"),
        bid=safe_float(ticker, "buy"),
        high=safe_float(ticker, "high"),
        low=safe_float(ticker, "low"),
        last=safe_float(ticker, "last"),
        volume=safe_float(ticker, "vol"),
        raw=ticker,
    )


def parse_order_status(code: Any) -> StatusLike:
    """Translate an orderState code; unrecognized codes are returned as given."""
    key = to_int(code) if isinstance(code, str) else code
    if isinstance(key, int) and not isinstance(key, bool) and key in ORDER_STATUS:
        return ORDER_STATUS[key]
    return code


def parse_side(trade_type: Any) -> Side:
    return Side.SELL if to_int(trade_type) == SELL_TRADE_TYPE else Side.BUY


def to_side(side: Any) -> Optional[Side]:
    """Accept a Side or a case-insensitive "buy"/"sell" string; anything else is None."""
    if isinstance(side, Side):
        return side
    try:
        return Side(str(side).lower())
    except ValueError:
        return None


def side_to_trade_type(side: Any) -> int:
    return SELL_TRADE_TYPE if to_side(side) is Side.SELL else BUY_TRADE_TYPE


def order_cost(filled: Optional[float], price: Optional[float]) -> Optional[float]:
    """filled * price; the venue does not report cost. None if either is unknown."""
    if filled is None or price is None:
        return None
    return filled * price


def parse_order(
    order: Mapping[str, Any],
    market: Optional[Market] = None,
    catalog: Optional[MarketCatalog] = None,
) -> Order:
    if not isinstance(order, Mapping) or "orderState" not in order:
        raise MalformedResponse(
            "order payload without orderState",
            operation="parse_order",
            argument="orderState",
        )
    if market is None:
        if "symbol" not in order:
            raise MalformedResponse(
                "order payload without symbol",
                operation="parse_order",
                argument="symbol",
            )
        if catalog is not None:
            market = catalog.by_id(str(order["symbol"]))
    timestamp = safe_integer(order, "createTime")
    price = safe_float(order, "orderPrice")
    filled = safe_float(order, "dealAmount")
    order_id = order.get("orderId")
    return Order(
        id=str(order_id) if order_id is not None else None,
        symbol=market.symbol if market is not None else None,
        side=parse_side(order.get("tradeType")),
        status=parse_order_status(order["orderState"]),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        price=price,
        amount=safe_float(order, "orderAmount"),
        cost=order_cost(filled, price),
        filled=filled,
        average=safe_float(order, "avgPrice"),
        fee=safe_float(order, "tradeFee"),
        raw=order,
    )


def parse_balance(accounts: Any) -> Balance:
    """`fund/allAccount` data: list of {currency, active, frozen, fix}."""
    if not isinstance(accounts, list):
        raise MalformedResponse(
            "account payload is not a list",
            operation="fetch_balance",
            argument="data",
        )
    currencies: Dict[str, BalanceEntry] = {}
    for entry in accounts:
        if not isinstance(entry, Mapping) or "currency" not in entry:
            continue
        code = str(entry["currency"]).upper()
        currencies[code] = BalanceEntry(
            free=safe_float(entry, "active"),
            used=safe_float(entry, "frozen"),
            total=safe_float(entry, "fix"),
        )
    return Balance(currencies=currencies, raw=accounts)


def _book_side(levels: Any) -> List[Tuple[float, float]]:
    out: List[Tuple[float, float]] = []
    for level in levels or []:
        if not isinstance(level, Mapping):
            continue
        price = to_float(level.get("price"))
        amount = to_float(level.get("amount"))
        if price is None or amount is None:
            continue
        out.append((price, amount))
    return out


def parse_order_book(
    book: Mapping[str, Any],
    market: Optional[Market] = None,
    timestamp: Optional[int] = None,
) -> OrderBook:
    if not isinstance(book, Mapping):
        raise MalformedResponse(
            "order book payload is not a mapping",
            operation="fetch_order_book",
            argument="data",
        )
    bids = sorted(_book_side(book.get("bids")), key=lambda lv: lv[0], reverse=True)
    asks = sorted(_book_side(book.get("asks")), key=lambda lv: lv[0])
    return OrderBook(
        symbol=market.symbol if market is not None else None,
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        bids=bids,
        asks=asks,
        raw=book,
    )


__all__ = [
    "ORDER_STATUS",
    "SELL_TRADE_TYPE",
    "BUY_TRADE_TYPE",
    "parse_ticker",
    "parse_order_status",
    "parse_side",
    "to_side",
    "side_to_trade_type",
    "order_cost",
    "parse_order",
    "parse_balance",
    "parse_order_book",
]
