from __future__ import annotations

"""
Exchange Adapter - Bitforex (Spot)
==================================

Async Bitforex adapter built on the common exchange primitives:
- Market catalog loaded once per instance and swapped atomically on reload
- Canonical tickers / orders / balances / order books via the normalizer
- Private endpoints signed with accessKey + nonce + HMAC-SHA256 `signData`
- Pluggable transport (defaults to aiohttp)

Notes
-----
- The venue has no market-order primitive: `create_order` accepts an order
  type but does not send it. A marketable order is placed by choosing a price
  through the book.
- `cancel_order` and `fetch_order` need the symbol; they fail before any I/O
  without it.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from bitforex_connector.common.decimal_utils import safe_integer
from bitforex_connector.common.symbol_codec import CurrencyCanonicalizer, common_currency_code
from bitforex_connector.exchange.catalog import MarketCatalog, parse_markets
from bitforex_connector.exchange.common import (
    ArgumentsRequired,
    Balance,
    Fees,
    HttpTransport,
    MalformedResponse,
    Market,
    Order,
    OrderBook,
    OrderStatus,
    OrderType,
    PreconditionError,
    Ticker,
    milliseconds,
)
from bitforex_connector.exchange.config import ConnectorConfig
from bitforex_connector.exchange.error_handling import exchange_operation_context, unwrap_response
from bitforex_connector.exchange.normalizer import (
    parse_balance,
    parse_order,
    parse_order_book,
    parse_ticker,
    side_to_trade_type,
    to_side,
)
from bitforex_connector.exchange.signer import PRIVATE, PUBLIC, RequestSigner

logger = logging.getLogger(__name__)

PUBLIC_ENDPOINTS = (
    "market/symbols",
    "market/ticker",
    "market/trades",
    "market/depth",
)

PRIVATE_ENDPOINTS = (
    "fund/allAccount",
    "fund/mainAccount",
    "trade/placeOrder",
    "trade/cancelOrder",
    "trade/cancelAllOrder",
    "trade/orderInfo",
    "trade/placeMultiOrder",
    "trade/cancelMultiOrder",
    "trade/multiOrderInfo",
)


class BitforexExchange:
    name = "bitforex"

    def __init__(
        self,
        *,
        config: Optional[ConnectorConfig] = None,
        transport: Optional[HttpTransport] = None,
        canonicalize: CurrencyCanonicalizer = common_currency_code,
        clock: Callable[[], int] = milliseconds,
    ) -> None:
        self.config = config or ConnectorConfig()
        self._transport = transport
        self._owns_transport = transport is None
        self._canonicalize = canonicalize
        self._signer = RequestSigner(
            api_base=self.config.api_base,
            version=self.config.version,
            credentials=self.config.credentials,
            clock=clock,
        )
        self._catalog: Optional[MarketCatalog] = None

    # ------------- lifecycle -------------

    def _get_transport(self) -> HttpTransport:
        if self._transport is None:
            from bitforex_connector.exchange.transport import AiohttpTransport

            self._transport = AiohttpTransport(timeout_s=self.config.timeout_s)
        return self._transport

    async def close(self) -> None:
        if self._owns_transport and self._transport is not None:
            close = getattr(self._transport, "close", None)
            if close is not None:
                await close()
            self._transport = None

    async def __aenter__(self) -> "BitforexExchange":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------- properties -------------

    @property
    def fees(self) -> Fees:
        return self.config.fees

    @property
    def catalog(self) -> Optional[MarketCatalog]:
        return self._catalog

    def market(self, symbol: str) -> Market:
        """Look up a loaded market by canonical symbol (call load_markets first)."""
        if self._catalog is None:
            raise PreconditionError(
                "markets not loaded, call load_markets() first",
                operation="market",
                argument=symbol,
            )
        return self._catalog.market(symbol)

    def market_id(self, symbol: str) -> str:
        return self.market(symbol).id

    # ------------- raw requests -------------

    async def request(
        self,
        path: str,
        api: str = PUBLIC,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Sign and dispatch; returns the decoded response envelope untouched."""
        known = PRIVATE_ENDPOINTS if api == PRIVATE else PUBLIC_ENDPOINTS
        if path not in known:
            logger.warning(f"Dispatching unlisted {api} endpoint {path}")
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        req = self._signer.sign(path, api=api, method=method, params=clean)
        return await self._get_transport().send(req.method, req.url, req.headers, req.body)

    async def public_request(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request(path, PUBLIC, "GET", params)

    async def private_request(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request(path, PRIVATE, "POST", params)

    # ------------- markets -------------

    async def fetch_markets(self) -> List[Market]:
        async with exchange_operation_context(self.name, "fetch_markets"):
            response = await self.public_request("market/symbols")
            data = unwrap_response(response, "fetch_markets")
            if not isinstance(data, list):
                raise MalformedResponse(
                    "market/symbols data is not a list",
                    operation="fetch_markets",
                    argument="data",
                )
            markets = parse_markets(data, self._canonicalize)
            logger.info(f"Fetched {len(markets)} markets")
            return markets

    async def load_markets(self, reload: bool = False) -> MarketCatalog:
        """Populate the catalog once; `reload=True` fetches and swaps in a fresh one."""
        if self._catalog is not None and not reload:
            return self._catalog
        catalog = MarketCatalog(await self.fetch_markets())
        self._catalog = catalog
        return catalog

    async def _resolve(self, symbol: str) -> Market:
        catalog = await self.load_markets()
        return catalog.market(symbol)

    # ------------- market data -------------

    async def fetch_ticker(self, symbol: str, params: Optional[Mapping[str, Any]] = None) -> Ticker:
        async with exchange_operation_context(self.name, "fetch_ticker", symbol=symbol):
            market = await self._resolve(symbol)
            request: Dict[str, Any] = {"symbol": market.id}
            request.update(params or {})
            response = await self.public_request("market/ticker", request)
            return parse_ticker(unwrap_response(response, "fetch_ticker"), market)

    async def fetch_order_book(
        self,
        symbol: str,
        limit: Optional[int] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> OrderBook:
        async with exchange_operation_context(self.name, "fetch_order_book", symbol=symbol):
            market = await self._resolve(symbol)
            request: Dict[str, Any] = {"symbol": market.id, "size": limit}
            request.update(params or {})
            response = await self.public_request("market/depth", request)
            data = unwrap_response(response, "fetch_order_book")
            return parse_order_book(data, market, safe_integer(response, "time"))

    # ------------- account -------------

    async def fetch_balance(self, params: Optional[Mapping[str, Any]] = None) -> Balance:
        async with exchange_operation_context(self.name, "fetch_balance"):
            self._require_credentials("fetch_balance")
            response = await self.private_request("fund/allAccount", params)
            return parse_balance(unwrap_response(response, "fetch_balance"))

    # ------------- orders -------------

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: Optional[float] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Order:
        async with exchange_operation_context(self.name, "create_order", symbol=symbol):
            order_side = to_side(side)
            if order_side is None:
                raise ArgumentsRequired(
                    f"bitforex create_order side must be buy or sell, got {side!r}",
                    operation="create_order",
                    argument="side",
                )
            self._require_credentials("create_order")
            if str(getattr(type, "value", type)).lower() == OrderType.MARKET.value:
                logger.debug("bitforex has no market orders; sending as priced order")
            market = await self._resolve(symbol)
            request: Dict[str, Any] = {
                "symbol": market.id,
                "amount": amount,
                "price": price,
                "tradeType": side_to_trade_type(order_side),
            }
            request.update(params or {})
            response = await self.private_request("trade/placeOrder", request)
            data = unwrap_response(response, "create_order")
            if not isinstance(data, Mapping) or "orderId" not in data:
                raise MalformedResponse(
                    "placeOrder response without orderId",
                    operation="create_order",
                    argument="orderId",
                )
            order_id = str(data["orderId"])
            logger.info(f"Order placed: {order_id} {order_side.value} {amount} {market.symbol} @ {price}")
            return Order(
                id=order_id,
                symbol=market.symbol,
                side=order_side,
                price=price,
                amount=amount,
                raw=response,
            )

    def _require_credentials(self, operation: str) -> None:
        self.config.credentials.require(operation=operation)

    def _require_symbol(self, symbol: Optional[str], operation: str) -> str:
        if symbol is None:
            raise ArgumentsRequired(
                f"bitforex {operation}() requires a symbol argument",
                operation=operation,
                argument="symbol",
            )
        return symbol

    async def cancel_order(
        self,
        id: str,
        symbol: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Order:
        async with exchange_operation_context(self.name, "cancel_order", symbol=symbol, order_id=id):
            symbol = self._require_symbol(symbol, "cancel_order")
            self._require_credentials("cancel_order")
            market = await self._resolve(symbol)
            request: Dict[str, Any] = {"orderId": id, "symbol": market.id}
            request.update(params or {})
            response = await self.private_request("trade/cancelOrder", request)
            data = unwrap_response(response, "cancel_order")
            logger.info(f"Order cancelled: {id}")
            return Order(
                id=str(id),
                symbol=market.symbol,
                side=None,
                status=OrderStatus.CANCELED if data is True else None,
                raw=response,
            )

    async def cancel_all_orders(
        self,
        symbol: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        async with exchange_operation_context(self.name, "cancel_all_orders", symbol=symbol):
            symbol = self._require_symbol(symbol, "cancel_all_orders")
            self._require_credentials("cancel_all_orders")
            market = await self._resolve(symbol)
            request: Dict[str, Any] = {"symbol": market.id}
            request.update(params or {})
            response = await self.private_request("trade/cancelAllOrder", request)
            return unwrap_response(response, "cancel_all_orders")

    async def fetch_order(
        self,
        id: str,
        symbol: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Order:
        async with exchange_operation_context(self.name, "fetch_order", symbol=symbol, order_id=id):
            symbol = self._require_symbol(symbol, "fetch_order")
            self._require_credentials("fetch_order")
            catalog = await self.load_markets()
            request: Dict[str, Any] = {"orderId": id, "symbol": catalog.market(symbol).id}
            request.update(params or {})
            response = await self.private_request("trade/orderInfo", request)
            # symbol comes from the payload, resolved through the venue-id index
            return parse_order(unwrap_response(response, "fetch_order"), catalog=catalog)


__all__ = ["BitforexExchange", "PUBLIC_ENDPOINTS", "PRIVATE_ENDPOINTS"]
