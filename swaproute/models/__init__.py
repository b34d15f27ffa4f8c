"""Data models for the swaproute pipeline."""

from swaproute.models.api import CandidateEdge, PriceQuote, QuoteStatus, Token
from swaproute.models.graph import Edge, Graph, PathResult
from swaproute.models.pipeline import GraphStats, RunResult, SnapshotResult
from swaproute.models.routes import RouteEntry

__all__ = [
    # Config / source models
    "Token",
    "CandidateEdge",
    "PriceQuote",
    "QuoteStatus",
    # Graph models
    "Edge",
    "Graph",
    "PathResult",
    # Pipeline models
    "GraphStats",
    "SnapshotResult",
    "RunResult",
    "RouteEntry",
]
