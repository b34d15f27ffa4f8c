class SwapRouteError(Exception):
    pass


class ConfigurationError(SwapRouteError):
    pass


class PriceSourceError(SwapRouteError):
    pass


class RouteStoreError(SwapRouteError):
    pass


class RouteNotFoundError(SwapRouteError):
    def __init__(self, from_token: str, to_token: str):
        super().__init__(f"No route found for {from_token} -> {to_token}")
        self.from_token = from_token
        self.to_token = to_token


class NegativeCycleError(SwapRouteError):
    def __init__(self, source: str, tokens: list[str]):
        super().__init__(f"Negative cycle reachable from {source} through {tokens}")
        self.source = source
        self.tokens = tokens


class TransientRPCError(PriceSourceError):
    """The node was reachable but temporarily refused the call (429, 5xx)."""
