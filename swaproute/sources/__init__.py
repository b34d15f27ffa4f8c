from .base import PriceSource
from .chainlink import ChainlinkSource
from .static import StaticPriceSource

__all__ = [
    "PriceSource",
    "ChainlinkSource",
    "StaticPriceSource",
]
