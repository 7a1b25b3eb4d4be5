"""Logical-date helpers honouring a user's configurable day start time.

A user who sets their day to start at 05:00 still belongs to "yesterday"
at 01:30. Every habit rule compares logical dates produced here, always as
plain ``date`` values so stray time-of-day components never leak into
day arithmetic.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import ValidationError

DEFAULT_DAY_START_TIME = "05:00"
DAY_START_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

Clock = Callable[[], datetime]
DayStart = Union[str, time, None]


def system_clock() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_day_start_time(value: DayStart) -> time:
    """Return ``value`` as a ``time``; empty values fall back to 05:00.

    Raises:
        ValidationError: when the string is not ``H:MM``/``HH:MM`` in 00:00-23:59
    """
    if value is None or value == "":
        value = DEFAULT_DAY_START_TIME
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    match = DAY_START_PATTERN.match(str(value).strip())
    if match is None:
        raise ValidationError("Invalid time format. Use HH:MM")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def format_day_start_time(value: DayStart) -> str:
    """Normalise a day start time to zero-padded ``HH:MM``."""
    return parse_day_start_time(value).strftime("%H:%M")


def resolve_timezone(name: str | None) -> tzinfo:
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def logical_date(
    timestamp: datetime,
    day_start_time: DayStart = DEFAULT_DAY_START_TIME,
    tz: tzinfo | None = None,
) -> date:
    """Return the calendar date ``timestamp`` belongs to for the given day start.

    Aware timestamps are first converted to ``tz`` when one is given; naive
    timestamps are taken as wall-clock time already.
    """
    start = parse_day_start_time(day_start_time)
    local = timestamp
    if tz is not None and timestamp.tzinfo is not None:
        local = timestamp.astimezone(tz)

    boundary = local.replace(hour=start.hour, minute=start.minute, second=0, microsecond=0)
    if local < boundary:
        return local.date() - timedelta(days=1)
    return local.date()


def today(clock: Clock, day_start_time: DayStart = DEFAULT_DAY_START_TIME, tz: tzinfo | None = None) -> date:
    """Logical date of "now" according to ``clock``."""
    return logical_date(clock(), day_start_time, tz)


def as_date(value: date | datetime) -> date:
    """Truncate datetimes to their date part; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole days from ``start`` to ``end`` after truncating both to dates."""
    return (as_date(end) - as_date(start)).days


__all__ = [
    "Clock",
    "DEFAULT_DAY_START_TIME",
    "as_date",
    "days_between",
    "format_day_start_time",
    "logical_date",
    "parse_day_start_time",
    "resolve_timezone",
    "system_clock",
    "today",
]
