from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel


@dataclass
class GraphStats:
    quotes_requested: int = 0
    quotes_ok: int = 0
    edges_considered: int = 0
    edges_built: int = 0
    skipped: list[str] = field(default_factory=list)


class SnapshotResult(BaseModel):
    run_timestamp: datetime
    timestamp: str
    entry_count: int = 0
    pairs_considered: int = 0
    skipped_sources: list[str] = []


class RunResult(BaseModel):
    started_at: datetime
    finished_at: datetime | None = None
    edges: int = 0
    snapshot: SnapshotResult | None = None
    skipped: bool = False
