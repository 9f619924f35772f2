"""Decoding of the account timestamp attributes.

AD exposes account times in two encodings: ``whenCreated``/``whenChanged`` are
GeneralizedTime values that arrive as calendar datetimes, while ``lastLogon``,
``lastLogoff`` and ``accountExpires`` are Integer8 FILETIME tick counts that
arrive split into a high/low pair of 32-bit integers.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional

from ..exceptions import DecodeFault
from ..utils.datetime_fmt import fmt_dt
from .attributes import AttributeBag, LargeInteger, has_attribute, raw_value
from .utils import filetime_to_datetime

logger = logging.getLogger(__name__)


class Encoding(enum.Enum):
    CALENDAR_VALUE = "calendar"
    SPLIT_INTEGER_64 = "split_integer_64"


@dataclass(frozen=True)
class TimeSource:
    attribute: str
    field: str
    encoding: Encoding


TIME_SOURCES: tuple[TimeSource, ...] = (
    TimeSource("whenCreated", "created_at", Encoding.CALENDAR_VALUE),
    TimeSource("whenChanged", "changed_at", Encoding.CALENDAR_VALUE),
    TimeSource("lastLogon", "last_logon_at", Encoding.SPLIT_INTEGER_64),
    TimeSource("lastLogoff", "last_logoff_at", Encoding.SPLIT_INTEGER_64),
    TimeSource("accountExpires", "expires_at", Encoding.SPLIT_INTEGER_64),
)

_BY_ATTRIBUTE = {ts.attribute.lower(): ts for ts in TIME_SOURCES}


def time_source(name: str) -> TimeSource:
    try:
        return _BY_ATTRIBUTE[name.lower()]
    except KeyError:
        raise ValueError(f"{name} is not a timestamp attribute") from None


def is_timestamp_attribute(name: str) -> bool:
    return name.lower() in _BY_ATTRIBUTE


def normalize_timestamp(bag: AttributeBag, name: str) -> Optional[datetime]:
    """Return the attribute as an aware UTC datetime, or None if it is not set.

    Raises DecodeFault if the attribute is present with an unexpected shape.
    """
    source = time_source(name)
    if not has_attribute(bag, source.attribute):
        return None

    value = raw_value(bag, source.attribute)

    if source.encoding is Encoding.CALENDAR_VALUE:
        if not isinstance(value, datetime):
            raise DecodeFault(source.attribute, f"expected a datetime, got {type(value).__name__}")
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

    if not isinstance(value, LargeInteger):
        raise DecodeFault(source.attribute, f"expected a large integer, got {type(value).__name__}")
    try:
        return filetime_to_datetime(value.value)
    except OverflowError as e:
        raise DecodeFault(source.attribute, f"tick count {value.value} out of range ({e})") from e


def timestamp_lines(bag: AttributeBag, tz=None) -> Iterator[str]:
    """Render every TimeSource entry as ``name = time`` or ``name not set``.

    A decode fault is logged and re-raised, except on the last table entry
    where it is rendered as not set.
    """
    last = TIME_SOURCES[-1]
    for source in TIME_SOURCES:
        try:
            when = normalize_timestamp(bag, source.attribute)
        except DecodeFault as e:
            logger.error("Failed to decode %s for %s: %s", source.attribute, bag.dn, e)
            if source is not last:
                raise
            when = None

        if when is not None:
            yield f"{source.attribute} = {fmt_dt(when, tz=tz)}"
        else:
            yield f"{source.attribute} not set"
