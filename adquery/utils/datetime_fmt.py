from __future__ import annotations

from datetime import datetime, tzinfo

from ..timezone_utils import format_iso_local


def fmt_dt(dt: datetime, tz: tzinfo | None = None) -> str:
    """Human-friendly datetime for console output: YYYY-MM-DD HH:MM:SS in display TZ.

    Dates near datetime.min/max cannot be shifted into every zone; those are
    shown in UTC with an explicit suffix instead.
    """
    try:
        return format_iso_local(dt, tz=tz)
    except OverflowError:
        return dt.replace(tzinfo=None).isoformat(sep=" ", timespec="seconds") + " UTC"
