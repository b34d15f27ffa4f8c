from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from swaproute.core.errors import NegativeCycleError
from swaproute.core.storage import RouteStore
from swaproute.models.graph import Graph
from swaproute.models.pipeline import SnapshotResult
from swaproute.models.routes import RouteEntry
from swaproute.pipeline.pathfinder import shortest_paths
from swaproute.utils.logging import get_logger
from swaproute.utils.time import to_iso, utc

logger = get_logger(__name__)


class SnapshotStage:
    """Computes the best path for every ordered token pair and appends the batch.

    All entries of one batch share the timestamp captured when the batch
    starts. Shortest paths are computed once per source token.
    """

    def __init__(
        self,
        store: RouteStore,
        symbols: Sequence[str],
        precision: int = 6,
        clock: Callable[[], datetime] = utc,
    ):
        self.store = store
        self.symbols = [s.upper() for s in symbols]
        self.precision = precision
        self.clock = clock

    def compute_entries(self, graph: Graph, run_timestamp: datetime) -> tuple[list[RouteEntry], SnapshotResult]:
        timestamp = to_iso(run_timestamp)
        result = SnapshotResult(run_timestamp=run_timestamp, timestamp=timestamp)
        entries: list[RouteEntry] = []

        for from_token in self.symbols:
            try:
                paths = shortest_paths(graph, from_token)
            except NegativeCycleError as e:
                logger.warning(f"Skipping routes from {from_token}: {e}")
                result.skipped_sources.append(from_token)
                continue

            for to_token in self.symbols:
                if from_token == to_token:
                    continue
                result.pairs_considered += 1

                best = paths.result(to_token, amount=1.0)
                if len(best.path) <= 1:
                    continue

                entries.append(
                    RouteEntry(
                        timestamp=timestamp,
                        from_token=from_token,
                        to_token=to_token,
                        path=list(best.path),
                        output=round(best.amount, self.precision),
                    )
                )

        result.entry_count = len(entries)
        return entries, result

    def execute(self, graph: Graph) -> SnapshotResult:
        run_timestamp = self.clock()
        entries, result = self.compute_entries(graph, run_timestamp)

        if entries:
            total = self.store.append(entries)
            logger.info(f"Logged {len(entries)} swap paths at {result.timestamp} ({total} total)")
        else:
            logger.info(f"No routes found at {result.timestamp}; nothing written")

        return result

    def compute_and_persist_snapshot(self, graph: Graph) -> int:
        return self.execute(graph).entry_count
