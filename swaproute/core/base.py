from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from swaproute.config import Settings
from swaproute.core.storage import RouteStore


@dataclass
class ResolvedConfig:
    http_timeout: int
    max_concurrency: int
    data_dir: Path
    interval_seconds: float


@dataclass
class RuntimeConfig:
    http_timeout: int | None = None
    max_concurrency: int | None = None
    data_dir: str | None = None
    interval_seconds: float | None = None

    def resolve(self, base: Settings) -> ResolvedConfig:
        data_dir_str = self.data_dir if self.data_dir is not None else base.default.data_dir
        return ResolvedConfig(
            http_timeout=self.http_timeout if self.http_timeout is not None else base.default.http_timeout,
            max_concurrency=self.max_concurrency if self.max_concurrency is not None else base.default.max_concurrency,
            data_dir=Path(data_dir_str),
            interval_seconds=(
                self.interval_seconds if self.interval_seconds is not None else base.interval_seconds
            ),
        )


@dataclass
class PipelineContext:
    settings: Settings
    run_timestamp: datetime
    data_dir: Path
    runtime_config: RuntimeConfig = field(default_factory=RuntimeConfig)
    store: RouteStore = field(init=False)
    _resolved: ResolvedConfig | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if isinstance(self.data_dir, str):
            self.data_dir = Path(self.data_dir)
        self.store = RouteStore(self.data_dir / self.settings.default.routes_file)

    @property
    def resolved(self) -> ResolvedConfig:
        if self._resolved is None:
            self._resolved = self.runtime_config.resolve(self.settings)
        return self._resolved

    @property
    def http_timeout(self) -> int:
        return self.resolved.http_timeout

    @property
    def max_concurrency(self) -> int:
        return self.resolved.max_concurrency

    @property
    def interval_seconds(self) -> float:
        return self.resolved.interval_seconds

    @property
    def heartbeat_path(self) -> Path:
        return self.data_dir / self.settings.default.heartbeat_file
