from __future__ import annotations

from swaproute.core.errors import RouteNotFoundError, RouteStoreError
from swaproute.core.storage import RouteStore
from swaproute.models.routes import RouteEntry
from swaproute.utils.logging import get_logger

logger = get_logger(__name__)


class RouteQueryService:
    """Read-only view over the latest snapshot. Re-reads the store on every call."""

    def __init__(self, store: RouteStore):
        self.store = store

    def get_latest_routes(self) -> list[RouteEntry]:
        try:
            return self.store.latest()
        except RouteStoreError as e:
            logger.error(f"Failed to read routes: {e}")
            return []

    def get_route(self, from_token: str, to_token: str) -> RouteEntry:
        """Find the latest route for a pair, ignoring symbol case.

        Raises:
            RouteNotFoundError: the latest snapshot has no entry for the pair
        """
        for entry in self.get_latest_routes():
            if entry.matches(from_token, to_token):
                return entry
        raise RouteNotFoundError(from_token, to_token)
