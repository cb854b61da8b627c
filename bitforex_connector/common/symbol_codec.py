from __future__ import annotations

"""
Symbol Codec utilities

Split Bitforex market identifiers (`coin-usdt-btc`) into their quote and base
tokens, and canonicalize legacy currency codes.
"""

from dataclasses import dataclass
from typing import Callable, Mapping

# Legacy tickers still seen on venues, mapped to the code in common use
COMMON_CURRENCY_ALIASES: Mapping[str, str] = {
    "XBT": "BTC",
    "BCC": "BCH",
    "DRK": "DASH",
}

CurrencyCanonicalizer = Callable[[str], str]


def common_currency_code(code: str) -> str:
    return COMMON_CURRENCY_ALIASES.get(code, code)


@dataclass(frozen=True)
class BitforexCodec:
    """Bitforex ids are `<prefix>-<quote>-<base>`, lower-case, e.g. `coin-usdt-btc`."""

    separator: str = "-"

    def split(self, market_id: str) -> tuple[str, str]:
        """Return the raw (quote_id, base_id) tokens; the leading prefix is discarded."""
        parts = str(market_id).split(self.separator)
        if len(parts) < 3:
            raise ValueError(f"Cannot decode market id: {market_id!r}")
        return parts[1], parts[2]


__all__ = [
    "COMMON_CURRENCY_ALIASES",
    "CurrencyCanonicalizer",
    "common_currency_code",
    "BitforexCodec",
]
