from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def _tz_name() -> str:
    """Preferred TZ name from environment (Docker/Unix TZ)."""
    return (os.getenv("TZ") or "UTC").strip() or "UTC"


def get_local_tzinfo(name: str | None = None) -> tzinfo:
    """Return tzinfo for display.

    - Tries system zoneinfo (ZoneInfo).
    - Falls back to fixed offsets for UTC-like names when tzdata is missing.
    - Defaults to UTC on any error.
    """
    name = (name or _tz_name()).strip() or "UTC"

    if name.upper() in {"UTC", "GMT", "ETC/UTC", "ETC/GMT", "Z"}:
        return timezone.utc

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        pass

    # No tzdata inside the image: accept "+05:00" style offsets
    sign = -1 if name.startswith("-") else 1
    hh, _, mm = name.lstrip("+-").partition(":")
    if hh.isdigit() and (not mm or mm.isdigit()):
        return timezone(sign * timedelta(hours=int(hh), minutes=int(mm or 0)))

    logger.warning("Unknown time zone %r, using UTC", name)
    return timezone.utc


LOCAL_TZ = get_local_tzinfo()


def to_local_dt(dt: Optional[datetime], tz: tzinfo | None = None) -> Optional[datetime]:
    """Convert a timestamp to the display tz (aware datetime).

    Naive datetimes are treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz or LOCAL_TZ)


def format_iso_local(dt: Optional[datetime], *, tz: tzinfo | None = None, timespec: str = "seconds") -> str:
    """Format timestamp as *local* time without TZ suffix.

    Returns ISO-like string: YYYY-MM-DD HH:MM:SS(.ffffff)
    """
    local = to_local_dt(dt, tz)
    if local is None:
        return ""
    return local.replace(tzinfo=None).isoformat(sep=" ", timespec=timespec)
