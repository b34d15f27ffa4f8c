from .graph import GraphBuilder
from .pathfinder import find_best_path, shortest_paths
from .query import RouteQueryService
from .scheduler import RoutePipeline
from .snapshot import SnapshotStage

__all__ = [
    "GraphBuilder",
    "SnapshotStage",
    "RouteQueryService",
    "RoutePipeline",
    "find_best_path",
    "shortest_paths",
]
