"""Instant and duration helpers shared by the validator and the runtime."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Protocol

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "as_utc",
    "effective_expiry",
    "format_timestamp",
    "parse_timestamp",
]


def as_utc(instant: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO 8601 timestamp.

    Accepts strings as well as ``datetime``/``date`` objects, which YAML
    loaders produce for unquoted timestamps.

    Returns:
        An aware UTC datetime, or None if the value is not a timestamp.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text[-1] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except (ValueError, OverflowError):
        return None


def format_timestamp(instant: datetime) -> str:
    return as_utc(instant).isoformat().replace("+00:00", "Z")


def effective_expiry(issued_at: datetime, duration_seconds: float, expires_at: datetime | None) -> datetime:
    """``expires_at`` when given, else ``issued_at + duration_seconds``."""
    if expires_at is not None:
        return expires_at
    if isinstance(duration_seconds, float) and not math.isfinite(duration_seconds):
        raise ValueError(f"duration must be finite, got {duration_seconds!r}")
    try:
        return issued_at + timedelta(seconds=duration_seconds)
    except OverflowError:
        # Saturate at the end of representable time.
        return datetime.max.replace(tzinfo=timezone.utc)


class Clock(Protocol):
    def now(self) -> datetime: ...


@dataclass(frozen=True)
class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass
class FixedClock:
    """Manually driven clock for deterministic tests and replays."""

    instant: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.instant = as_utc(self.instant)

    def now(self) -> datetime:
        return self.instant

    def advance(self, seconds: float) -> datetime:
        self.instant = self.instant + timedelta(seconds=seconds)
        return self.instant

    def set(self, instant: datetime) -> None:
        self.instant = as_utc(instant)
