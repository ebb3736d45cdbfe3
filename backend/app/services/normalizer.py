"""Canonical parsing of the loosely formatted day and time strings found in
course timetable rows.

Every accepted pattern is listed here; anything else is rejected with
:class:`ParseError`. Weekdays use Sunday=0 throughout the service.
"""

from __future__ import annotations

import re

WEEKDAY_ABBREVIATIONS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

_WEEKDAY_LOOKUP: dict[str, int] = {}
for _index, (_short, _full) in enumerate(zip(WEEKDAY_ABBREVIATIONS, WEEKDAY_NAMES)):
    _WEEKDAY_LOOKUP[_short.lower()] = _index
    _WEEKDAY_LOOKUP[_full.lower()] = _index

MINUTES_PER_DAY = 24 * 60

TIME_24H_PATTERN = re.compile(r"^(?P<hour>[01]?\d|2[0-3]):(?P<minute>[0-5]\d)$")
TIME_12H_PATTERN = re.compile(
    r"^(?P<hour>0?[1-9]|1[0-2])(?::(?P<minute>[0-5]\d))?\s*(?P<marker>am|pm)$",
    re.IGNORECASE,
)
RANGE_SEPARATOR_PATTERN = re.compile(r"\s*[-–—]\s*")


class ParseError(ValueError):
    """A day or time string does not match any accepted pattern."""


class ValidationError(ValueError):
    """A well-formed value that is semantically invalid, e.g. ``start >= end``."""


def parse_time(raw: str) -> int:
    """Return minutes since midnight for a single 24-hour or am/pm time."""
    value = (raw or "").strip()
    if not value:
        raise ParseError("Empty time value")

    match = TIME_24H_PATTERN.match(value)
    if match:
        return int(match.group("hour")) * 60 + int(match.group("minute"))

    match = TIME_12H_PATTERN.match(value)
    if match:
        hour = int(match.group("hour"))
        minute = int(match.group("minute") or 0)
        marker = match.group("marker").lower()
        if hour == 12:
            hour = 0
        if marker == "pm":
            hour += 12
        return hour * 60 + minute

    raise ParseError(f"Unrecognised time value: {raw!r}")


def parse_time_range(raw: str) -> tuple[int, int]:
    """Parse ``"HH:MM-HH:MM"`` (either side may carry an am/pm marker).

    Ranges that end at or before their start, including ones that would
    wrap past midnight, raise :class:`ValidationError`.
    """
    value = (raw or "").strip()
    parts = RANGE_SEPARATOR_PATTERN.split(value)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ParseError(f"Unrecognised time range: {raw!r}")

    start_minute = parse_time(parts[0])
    end_minute = parse_time(parts[1])
    if start_minute >= end_minute:
        raise ValidationError(
            f"Time range must end after it starts: {format_time_range(start_minute, end_minute)}"
        )
    return start_minute, end_minute


def parse_weekday(raw: str) -> int:
    """Map ``Sun``..``Sat`` (or full day names), case-insensitively, to 0..6."""
    key = (raw or "").strip().lower()
    try:
        return _WEEKDAY_LOOKUP[key]
    except KeyError:
        raise ParseError(f"Unrecognised weekday: {raw!r}") from None


def validate_weekday(value: int) -> int:
    if not 0 <= value <= 6:
        raise ValidationError(f"Weekday index out of range: {value}")
    return value


def weekday_abbreviation(weekday: int) -> str:
    return WEEKDAY_ABBREVIATIONS[validate_weekday(weekday)]


def format_minutes(minute: int) -> str:
    if not 0 <= minute < MINUTES_PER_DAY:
        raise ValidationError(f"Minute of day out of range: {minute}")
    hours, minutes = divmod(minute, 60)
    return f"{hours:02d}:{minutes:02d}"


def format_time_range(start_minute: int, end_minute: int) -> str:
    return f"{format_minutes(start_minute)}-{format_minutes(end_minute)}"
