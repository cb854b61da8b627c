# Exchange adapter for Bitforex
# Catalog, normalizer and signer are usable standalone; BitforexExchange ties them together.

from .bitforex import BitforexExchange
from .catalog import MarketCatalog, parse_market, parse_markets
from .common import (
    ArgumentsRequired,
    AuthenticationError,
    BadSymbol,
    Balance,
    BalanceEntry,
    CredentialsRequired,
    ExchangeError,
    ExchangeRejected,
    Fees,
    HttpTransport,
    InsufficientFunds,
    InvalidOrder,
    InvalidSymbol,
    MalformedResponse,
    Market,
    Order,
    OrderBook,
    OrderNotFound,
    OrderStatus,
    OrderType,
    PermissionDenied,
    PreconditionError,
    RateLimitError,
    Side,
    SignedRequest,
    Ticker,
)
from .config import ConfigError, ConnectorConfig, Credentials, load_config
from .normalizer import parse_order, parse_order_status, parse_ticker
from .signer import RequestSigner

__all__ = [
    # Errors
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
    # Records
    "Side",
    "OrderType",
    "OrderStatus",
    "Market",
    "Ticker",
    "Order",
    "Balance",
    "BalanceEntry",
    "OrderBook",
    "Fees",
    "SignedRequest",
    "HttpTransport",
    # Components
    "MarketCatalog",
    "parse_market",
    "parse_markets",
    "parse_ticker",
    "parse_order",
    "parse_order_status",
    "RequestSigner",
    # Config
    "ConfigError",
    "ConnectorConfig",
    "Credentials",
    "load_config",
    # Adapter
    "BitforexExchange",
]
