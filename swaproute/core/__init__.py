from swaproute.core.base import (
    PipelineContext,
    ResolvedConfig,
    RuntimeConfig,
)
from swaproute.core.errors import (
    ConfigurationError,
    NegativeCycleError,
    PriceSourceError,
    RouteNotFoundError,
    RouteStoreError,
    SwapRouteError,
    TransientRPCError,
)
from swaproute.core.retry import with_retry
from swaproute.core.storage import RouteStore

__all__ = [
    "PipelineContext",
    "ResolvedConfig",
    "RuntimeConfig",
    "RouteStore",
    "with_retry",
    "SwapRouteError",
    "ConfigurationError",
    "PriceSourceError",
    "RouteStoreError",
    "RouteNotFoundError",
    "NegativeCycleError",
    "TransientRPCError",
]
