"""Bellman-Ford best paths over the -ln(rate) graph.

Summing edge weights along a path is the same as multiplying the fee-adjusted
rates, so the minimum-weight path is the maximum-output swap path and
``amount * exp(-distance)`` is what comes out the other end.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from swaproute.core.errors import NegativeCycleError
from swaproute.models.graph import Graph, PathResult, weight_to_factor

# Reciprocal zero-fee edges can sum to a tiny negative weight through -ln rounding.
RELAX_TOLERANCE = 1e-12


@dataclass
class ShortestPaths:
    source: str
    distance: dict[str, float]
    predecessor: dict[str, str | None]

    def path_to(self, target: str) -> tuple[str, ...]:
        if target not in self.distance:
            return ()

        path: list[str] = []
        seen: set[str] = set()
        current: str | None = target
        while current is not None and current not in seen:
            seen.add(current)
            path.append(current)
            current = self.predecessor.get(current)
        path.reverse()

        if not path or path[0] != self.source:
            return ()
        return tuple(path)

    def result(self, target: str, amount: float = 1.0) -> PathResult:
        path = self.path_to(target)
        if not path or math.isinf(self.distance[target]):
            return PathResult()
        return PathResult(path=path, amount=amount * weight_to_factor(self.distance[target]))


def shortest_paths(graph: Graph, source: str) -> ShortestPaths:
    """Single-source Bellman-Ford over every edge of ``graph``.

    Runs |V|-1 relaxation rounds (stopping early once a round changes
    nothing), then one more round: any further improvement means a negative
    cycle is reachable from ``source`` and the distances are not stable.

    Raises:
        NegativeCycleError: a negative-weight cycle is reachable from ``source``
    """
    tokens = graph.tokens
    distance: dict[str, float] = {t: math.inf for t in tokens}
    predecessor: dict[str, str | None] = {t: None for t in tokens}

    if source not in graph:
        return ShortestPaths(source=source, distance=distance, predecessor=predecessor)

    distance[source] = 0.0
    edges = list(graph.edges())

    for _ in range(len(tokens) - 1):
        changed = False
        for e in edges:
            if distance[e.source] + e.weight < distance[e.target] - RELAX_TOLERANCE:
                distance[e.target] = distance[e.source] + e.weight
                predecessor[e.target] = e.source
                changed = True
        if not changed:
            break
    else:
        unstable = sorted(
            {e.target for e in edges if distance[e.source] + e.weight < distance[e.target] - RELAX_TOLERANCE}
        )
        if unstable:
            raise NegativeCycleError(source, unstable)

    return ShortestPaths(source=source, distance=distance, predecessor=predecessor)


def find_best_path(graph: Graph, from_token: str, to_token: str, amount: float = 1.0) -> PathResult:
    if from_token == to_token:
        return PathResult(path=(from_token,), amount=amount) if from_token in graph else PathResult()
    return shortest_paths(graph, from_token).result(to_token, amount)
