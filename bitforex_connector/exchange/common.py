from __future__ import annotations

"""
Exchange - Common primitives
============================

Dependency-free primitives shared by the Bitforex adapter:
- Error taxonomy (precondition / data-shape / venue rejection)
- Canonical records (markets, tickers, orders, balances, order books)
- The signed request descriptor handed to a transport
- HTTP transport protocol and HMAC helpers

This module **does not** perform network I/O.
"""

import hashlib
import hmac
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple, Union


# --------------------------- Errors ---------------------------


class ExchangeError(RuntimeError):
    """Base error; `operation` and `argument` tell callers where it came from."""

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        argument: Optional[str] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.argument = argument
        self.code = code


class PreconditionError(ExchangeError):
    """Caller input rejected before any network interaction."""


class ArgumentsRequired(PreconditionError):
    pass


class CredentialsRequired(PreconditionError):
    pass


class BadSymbol(PreconditionError):
    pass


class MalformedResponse(ExchangeError):
    """Venue payload is missing a structurally required field."""


class ExchangeRejected(ExchangeError):
    """Venue answered with `success: false`."""


class AuthenticationError(ExchangeRejected):
    pass


class PermissionDenied(ExchangeRejected):
    pass


class InsufficientFunds(ExchangeRejected):
    pass


class InvalidSymbol(ExchangeRejected):
    """Venue refused the market id; distinct from a local catalog miss (BadSymbol)."""


class InvalidOrder(ExchangeRejected):
    pass


class OrderNotFound(ExchangeRejected):
    pass


class RateLimitError(ExchangeRejected):
    pass


# --------------------------- Models ---------------------------


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"


class OrderStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELED = "canceled"


# Unknown venue codes pass through untouched
StatusLike = Union[OrderStatus, int, str, None]


@dataclass(frozen=True)
class Market:
    id: str
    symbol: str
    base: str
    quote: str
    base_id: str
    quote_id: str
    price_precision: Optional[int] = None
    amount_precision: Optional[int] = None
    min_amount: Optional[float] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Ticker:
    symbol: Optional[str]
    timestamp: Optional[int]
    datetime: Optional[str]
    ask: Optional[float]
    bid: Optional[float]
    high: Optional[float]
    low: Optional[float]
    last: Optional[float]
    volume: Optional[float]
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Order:
    id: Optional[str]
    symbol: Optional[str]
    side: Optional[Side]
    status: StatusLike = None
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    price: Optional[float] = None
    amount: Optional[float] = None
    cost: Optional[float] = None
    filled: Optional[float] = None
    average: Optional[float] = None
    fee: Optional[float] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class BalanceEntry:
    free: Optional[float]
    used: Optional[float]
    total: Optional[float]


@dataclass(frozen=True)
class Balance:
    currencies: Dict[str, BalanceEntry]
    raw: Any = field(default=None, compare=False, repr=False)

    def __getitem__(self, code: str) -> BalanceEntry:
        return self.currencies[code]

    def __contains__(self, code: object) -> bool:
        return code in self.currencies


@dataclass(frozen=True)
class OrderBook:
    symbol: Optional[str]
    timestamp: Optional[int]
    datetime: Optional[str]
    bids: List[Tuple[float, float]]
    asks: List[Tuple[float, float]]
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Fees:
    """Flat trading fees as fractions of notional."""

    maker: float
    taker: float


@dataclass(frozen=True)
class SignedRequest:
    """Fully-formed request descriptor; building one performs no I/O."""

    url: str
    method: str
    body: Optional[str] = None
    headers: Optional[Mapping[str, str]] = None


# --------------------------- HTTP Protocol ---------------------------


class HttpTransport(Protocol):
    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> Any: ...


# --------------------------- Helpers ---------------------------


def milliseconds() -> int:
    return time.time_ns() // 1_000_000


def hmac_sha256(secret: str, msg: str) -> str:
    return hmac.new(
        secret.encode("utf-8"), msg.encode("utf-8"), hashlib.sha256
    ).hexdigest()


__all__ = [
    "ExchangeError",
    "PreconditionError",
    "ArgumentsRequired",
    "CredentialsRequired",
    "BadSymbol",
    "MalformedResponse",
    "ExchangeRejected",
    "AuthenticationError",
    "PermissionDenied",
    "InsufficientFunds",
    "InvalidSymbol",
    "InvalidOrder",
    "OrderNotFound",
    "RateLimitError",
    "Side",
    "OrderType",
    "OrderStatus",
    "StatusLike",
    "Market",
    "Ticker",
    "Order",
    "BalanceEntry",
    "Balance",
    "OrderBook",
    "Fees",
    "SignedRequest",
    "HttpTransport",
    "milliseconds",
    "hmac_sha256",
]
