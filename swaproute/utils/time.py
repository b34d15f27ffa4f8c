from __future__ import annotations

from datetime import datetime, timezone

MS_PER_SECOND = 1000


def utc() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing ``Z``."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def datetime_to_ms(dt: datetime) -> int:
    return int(dt.timestamp() * MS_PER_SECOND)


def parse_iso(iso_str: str) -> datetime:
    dt = datetime.fromisoformat(iso_str.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_iso_to_ms(iso_str: str) -> int:
    return datetime_to_ms(parse_iso(iso_str))


def parse_iso_or_none(iso_str: str | None) -> datetime | None:
    if not iso_str:
        return None
    try:
        return parse_iso(iso_str)
    except ValueError:
        return None


def format_duration(seconds: int) -> str:
    days, rem = divmod(int(seconds), 86_400)
    hours, rem = divmod(rem, 3_600)
    minutes, secs = divmod(rem, 60)

    parts: list[str] = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0 or days > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours > 0 or days > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return " ".join(parts)
