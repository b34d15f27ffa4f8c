from __future__ import annotations

from collections.abc import Mapping

from swaproute.models.api import PriceQuote, Token
from swaproute.sources.base import PriceSource


class StaticPriceSource(PriceSource):
    """Fixed prices keyed by symbol. Symbols without a price are UNAVAILABLE."""

    def __init__(self, prices: Mapping[str, float] | None = None):
        self.prices = {symbol.upper(): price for symbol, price in (prices or {}).items()}
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return "static"

    async def get_price(self, token: Token) -> PriceQuote:
        self.calls.append(token.symbol)
        price = self.prices.get(token.symbol)
        if price is None:
            return PriceQuote.unavailable(token.symbol, "no static price configured")
        if price <= 0:
            return PriceQuote.unavailable(token.symbol, f"non-positive price {price}")
        return PriceQuote.of(token.symbol, float(price))


def parse_price_overrides(values: list[str]) -> dict[str, float]:
    """Parse ``SYMBOL=PRICE`` pairs as given on the command line."""
    prices: dict[str, float] = {}
    for raw in values:
        symbol, sep, price = raw.partition("=")
        if not sep or not symbol.strip():
            raise ValueError(f"Expected SYMBOL=PRICE, got {raw!r}")
        try:
            prices[symbol.strip().upper()] = float(price)
        except ValueError:
            raise ValueError(f"Price for {symbol.strip()} is not a number: {price!r}") from None
    return prices
