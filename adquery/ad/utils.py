from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone


FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)

_AD_GT_RE = re.compile(r"^(\d{14})(?:\.(\d+))?Z$")


def escape_ldap_filter_value(value: str) -> str:
    """RFC 4515 escaping for LDAP filter values."""
    out: list[str] = []
    for ch in value:
        if ch == "\\":
            out.append("\\5c")
        elif ch == "*":
            out.append("\\2a")
        elif ch == "(":
            out.append("\\28")
        elif ch == ")":
            out.append("\\29")
        elif ch == "\x00":
            out.append("\\00")
        else:
            out.append(ch)
    return "".join(out)


def filetime_to_datetime(ticks: int) -> datetime:
    """Convert Windows FILETIME (100ns since 1601-01-01 UTC) to an aware datetime.

    Raises OverflowError for negative tick counts and for values past
    datetime.max (e.g. accountExpires = 0x7FFFFFFFFFFFFFFF).
    """
    if ticks < 0:
        raise OverflowError(f"negative FILETIME {ticks}")
    return FILETIME_EPOCH + timedelta(microseconds=ticks // 10)


def parse_generalized_time(v: str | bytes) -> datetime | None:
    """Parse AD GeneralizedTime (YYYYmmddHHMMSS(.f)Z) as UTC; None if it doesn't match."""
    if isinstance(v, (bytes, bytearray)):
        v = bytes(v).decode("ascii", errors="replace")
    m = _AD_GT_RE.match((v or "").strip())
    if not m:
        return None
    try:
        return datetime.strptime(m.group(1), "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return None
