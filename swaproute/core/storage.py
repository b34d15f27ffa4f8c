from __future__ import annotations

import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from swaproute.core.errors import RouteStoreError
from swaproute.models.routes import RouteEntry, RouteEntryList
from swaproute.utils.logging import get_logger

logger = get_logger(__name__)


class RouteStore:
    """Append-only JSON document of every route entry ever written.

    Writes go to a temp file in the same directory which is then renamed
    over the collection, so readers see either the old or the new document.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read_all(self) -> list[RouteEntry]:
        """Load the whole collection. A missing file is an empty collection.

        Raises:
            RouteStoreError: the file exists but is unreadable or not a valid route list
        """
        if not self.path.exists():
            return []
        try:
            content = self.path.read_bytes()
        except OSError as e:
            raise RouteStoreError(f"Failed to read {self.path}: {e}") from e
        if not content.strip():
            return []
        try:
            return RouteEntryList.validate_json(content)
        except ValidationError as e:
            raise RouteStoreError(f"Failed to parse {self.path}: {e.error_count()} errors") from e

    def latest(self) -> list[RouteEntry]:
        entries = self.read_all()
        if not entries:
            return []
        latest_ms = max(e.timestamp_ms for e in entries)
        return [e for e in entries if e.timestamp_ms == latest_ms]

    def append(self, entries: Sequence[RouteEntry]) -> int:
        """Append ``entries`` after the existing history in a single write.

        Returns the total number of entries in the collection afterwards.
        Corrupt prior history is logged and dropped so the current run is
        still recorded.
        """
        try:
            previous = self.read_all()
        except RouteStoreError as e:
            logger.error(f"Existing route history unreadable, starting fresh: {e}")
            previous = []

        combined = [*previous, *entries]
        self._write(combined)
        return len(combined)

    def _write(self, entries: list[RouteEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = RouteEntryList.dump_json(entries, by_alias=True, indent=2)

        with tempfile.NamedTemporaryFile(
            mode="wb", dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp_path = Path(tmp.name)

        try:
            tmp_path.replace(self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def __repr__(self) -> str:
        return f"RouteStore(path={self.path})"
