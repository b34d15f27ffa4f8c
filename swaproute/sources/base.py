from __future__ import annotations

from abc import ABC, abstractmethod

from swaproute.models.api import PriceQuote, Token


class PriceSource(ABC):
    """Spot price provider, quoted in one common reference unit.

    Implementations never raise for a failed quote; they return a
    ``PriceQuote`` whose status says why there is no price. ``get_price``
    must be safe to call concurrently for distinct tokens.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def get_price(self, token: Token) -> PriceQuote:
        pass

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> PriceSource:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
