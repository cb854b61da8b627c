from __future__ import annotations

"""
Market catalog
==============

Builds canonical `Market` records from the venue's `market/symbols` payload and
indexes them by canonical symbol and by venue id. A catalog is immutable once
built; the exchange swaps in a new one on reload.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from bitforex_connector.common.decimal_utils import safe_float, safe_integer
from bitforex_connector.common.symbol_codec import (
    BitforexCodec,
    CurrencyCanonicalizer,
    common_currency_code,
)
from bitforex_connector.exchange.common import BadSymbol, Market, MalformedResponse

logger = logging.getLogger(__name__)

_CODEC = BitforexCodec()


def parse_market(
    descriptor: Mapping[str, Any],
    canonicalize: CurrencyCanonicalizer = common_currency_code,
) -> Market:
    """One `market/symbols` entry -> Market.

    The id `<prefix>-<quote>-<base>` is split on '-', the prefix discarded, and
    both remaining tokens upper-cased and canonicalized.
    """
    if not isinstance(descriptor, Mapping) or "symbol" not in descriptor:
        raise MalformedResponse(
            f"market descriptor without symbol: {descriptor!r}",
            operation="fetch_markets",
            argument="symbol",
        )
    market_id = str(descriptor["symbol"])
    try:
        quote_id, base_id = _CODEC.split(market_id)
    except ValueError as e:
        raise MalformedResponse(
            str(e), operation="fetch_markets", argument=market_id
        ) from e
    base = canonicalize(base_id.upper())
    quote = canonicalize(quote_id.upper())
    return Market(
        id=market_id,
        symbol=f"{base}/{quote}",
        base=base,
        quote=quote,
        base_id=base_id,
        quote_id=quote_id,
        price_precision=safe_integer(descriptor, "pricePrecision"),
        amount_precision=safe_integer(descriptor, "amountPrecision"),
        min_amount=safe_float(descriptor, "minOrderAmount"),
        raw=descriptor,
    )


def parse_markets(
    descriptors: Iterable[Mapping[str, Any]],
    canonicalize: CurrencyCanonicalizer = common_currency_code,
) -> List[Market]:
    """Input order is preserved; duplicates are kept as-is."""
    return [parse_market(d, canonicalize) for d in descriptors]


class MarketCatalog:
    """Bidirectional index over a list of markets (last duplicate wins)."""

    def __init__(self, markets: Sequence[Market]) -> None:
        self._markets: List[Market] = list(markets)
        self._by_symbol: Dict[str, Market] = {}
        self._by_id: Dict[str, Market] = {}
        for m in self._markets:
            if m.symbol in self._by_symbol or m.id in self._by_id:
                logger.warning(f"Duplicate market {m.id} ({m.symbol}); later entry wins")
            self._by_symbol[m.symbol] = m
            self._by_id[m.id] = m

    def __len__(self) -> int:
        return len(self._markets)

    def __iter__(self) -> Iterator[Market]:
        return iter(self._markets)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._by_symbol

    @property
    def symbols(self) -> List[str]:
        return list(self._by_symbol)

    def market(self, symbol: str) -> Market:
        try:
            return self._by_symbol[symbol]
        except KeyError:
            raise BadSymbol(
                f"bitforex does not have market symbol {symbol}",
                operation="market",
                argument=symbol,
            ) from None

    def by_id(self, market_id: str) -> Optional[Market]:
        return self._by_id.get(market_id)


__all__ = ["parse_market", "parse_markets", "MarketCatalog"]
