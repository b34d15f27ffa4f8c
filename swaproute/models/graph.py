"""Runtime graph objects, rebuilt from scratch on every pipeline run."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field


def edge_weight(rate: float, fee: float) -> float:
    return -math.log(rate * (1.0 - fee))


def weight_to_factor(weight: float) -> float:
    return math.exp(-weight)


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    weight: float
    rate: float
    fee: float


@dataclass
class Graph:
    adjacency: dict[str, list[Edge]] = field(default_factory=dict)

    def add_edge(self, edge: Edge) -> None:
        self.adjacency.setdefault(edge.source, []).append(edge)
        self.adjacency.setdefault(edge.target, [])

    def edges(self) -> Iterator[Edge]:
        for outgoing in self.adjacency.values():
            yield from outgoing

    def outgoing(self, token: str) -> list[Edge]:
        return self.adjacency.get(token, [])

    def edge(self, source: str, target: str) -> Edge | None:
        for e in self.outgoing(source):
            if e.target == target:
                return e
        return None

    @property
    def tokens(self) -> list[str]:
        return list(self.adjacency)

    @property
    def edge_count(self) -> int:
        return sum(len(outgoing) for outgoing in self.adjacency.values())

    def is_empty(self) -> bool:
        return self.edge_count == 0

    def __contains__(self, token: object) -> bool:
        return token in self.adjacency


@dataclass(frozen=True)
class PathResult:
    path: tuple[str, ...] = ()
    amount: float = 0.0

    @property
    def reachable(self) -> bool:
        return len(self.path) > 0

    @property
    def hops(self) -> int:
        return max(len(self.path) - 1, 0)
