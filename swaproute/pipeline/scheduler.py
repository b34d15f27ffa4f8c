from __future__ import annotations

import asyncio

from swaproute.models.pipeline import RunResult
from swaproute.pipeline.graph import GraphBuilder
from swaproute.pipeline.snapshot import SnapshotStage
from swaproute.utils.logging import get_logger
from swaproute.utils.time import utc

logger = get_logger(__name__)


class RoutePipeline:
    """Builder -> path finder -> snapshot, once now and then every ``interval`` seconds.

    Ticks follow a fixed wall-clock cadence. A tick that fires while the
    previous run is still in flight is skipped, so there is never more than
    one writer on the route store.
    """

    def __init__(self, builder: GraphBuilder, snapshot: SnapshotStage, interval: float = 60.0):
        self.builder = builder
        self.snapshot = snapshot
        self.interval = interval
        self.runs = 0
        self.skipped = 0
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def run_once(self) -> RunResult:
        result = RunResult(started_at=utc())
        graph = await self.builder.build()
        result.edges = graph.edge_count
        result.snapshot = self.snapshot.execute(graph)
        result.finished_at = utc()
        return result

    async def tick(self) -> RunResult | None:
        if self._in_flight:
            self.skipped += 1
            logger.warning("Previous run still in flight, skipping this tick")
            return RunResult(started_at=utc(), skipped=True)

        self._in_flight = True
        try:
            result = await self.run_once()
            self.runs += 1
            return result
        except Exception:
            logger.exception("Pipeline run failed; retrying at next interval")
            return None
        finally:
            self._in_flight = False

    async def run_forever(self, max_ticks: int | None = None) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        pending: set[asyncio.Task[RunResult | None]] = set()
        ticks = 0

        try:
            while max_ticks is None or ticks < max_ticks:
                task = asyncio.create_task(self.tick())
                pending.add(task)
                task.add_done_callback(pending.discard)
                ticks += 1

                if max_ticks is not None and ticks >= max_ticks:
                    break

                next_tick += self.interval
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
        finally:
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
