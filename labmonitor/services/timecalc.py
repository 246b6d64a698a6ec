from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from ..core.config import settings


def local_tz() -> tzinfo:
    return ZoneInfo(settings.TZ) if settings.TZ else timezone.utc


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """Attach the display timezone to naive datetimes; aware ones pass through."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz or local_tz())
    return dt


def parse_iso(ts: str | None, tz: tzinfo | None = None) -> datetime | None:
    """Parse an ISO-8601 timestamp string.
    If naive, attach the provided tz. Returns None if ts is falsy.
    """
    if not ts:
        return None
    dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    return ensure_aware(dt, tz)


def hours_between(start: datetime, end: datetime) -> float:
    """Signed length of ``start``..``end`` in hours; no clamping."""
    return (end - start).total_seconds() / 3600


def to_local(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = parse_iso(value)
        except ValueError:
            return None
    else:
        return None
    return ensure_aware(dt).astimezone(local_tz())


def local_date(value: datetime) -> date:
    return ensure_aware(value).astimezone(local_tz()).date()


def fmt_dt(value: Any, fmt: str = "%Y-%m-%d %I:%M %p") -> str:
    dt = to_local(value)
    return dt.strftime(fmt) if dt else ""


def fmt_date(value: Any, fmt: str = "%Y-%m-%d") -> str:
    dt = to_local(value)
    return dt.strftime(fmt) if dt else ""


def fmt_time(value: Any, fmt: str = "%I:%M %p") -> str:
    dt = to_local(value)
    return dt.strftime(fmt) if dt else ""
