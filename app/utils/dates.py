"""Timezone-aware date helpers.

Every function here works on absolute instants (aware ``datetime`` objects in
UTC) and only projects them onto civil calendar fields when a timezone is
passed explicitly. Nothing depends on the host process' local time.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from zoneinfo import ZoneInfo

from babel.dates import format_datetime as _babel_format_datetime


class TZ(str, Enum):
    UTC = "UTC"
    JST = "Asia/Tokyo"


class LOCALES(str, Enum):
    EN = "en_US"
    JA = "ja"


class InvalidDatetimeFormat(ValueError):
    """Raised when a string is not a canonical ISO 8601 UTC timestamp."""


@dataclass(slots=True, frozen=True)
class DateParts:
    year: int
    month_index: int
    day: int
    hour: int
    minute: int
    second: int
    millisecond: int


_ISO_RE = re.compile(
    r"^([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})\.([0-9]{3})Z$"
)


def _zone(time_zone: TZ | str) -> ZoneInfo:
    return ZoneInfo(TZ(time_zone).value)


def _as_utc(instant: datetime) -> datetime:
    # Naive values come back from SQLite; they are always stored as UTC.
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def _shift_months(year: int, month_index: int, months: int) -> tuple[int, int]:
    total = year * 12 + month_index + months
    return total // 12, total % 12


def now() -> datetime:
    return datetime.now(timezone.utc)


def create_date(
    year: int,
    month_index: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    millisecond: int = 0,
    *,
    time_zone: TZ | str = TZ.UTC,
) -> datetime:
    """Build the instant at which the given wall-clock fields occur in ``time_zone``.

    ``month_index`` is zero based. Fields outside their usual range roll over
    into the neighbouring unit, so ``month_index=12`` is January of the next
    year and ``day=0`` is the last day of the previous month.

    The zone offset is looked up for the constructed wall time, not for the
    moment of the call, so zones whose offset changes over the year resolve
    correctly.
    """

    year, month_index = _shift_months(year, 0, month_index)
    wall = datetime(year, month_index + 1, 1) + timedelta(
        days=day - 1,
        hours=hour,
        minutes=minute,
        seconds=second,
        milliseconds=millisecond,
    )
    return wall.replace(tzinfo=_zone(time_zone)).astimezone(timezone.utc)


def to_iso(instant: datetime) -> str:
    """Format ``instant`` as ``YYYY-MM-DDTHH:mm:ss.sssZ`` in UTC."""

    value = _as_utc(instant)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}Z"
    )


def is_valid_iso(value: object) -> bool:
    if not isinstance(value, str):
        return False
    match = _ISO_RE.match(value)
    if match is None:
        return False
    year, month, day, hour, minute, second, millis = (int(part) for part in match.groups())
    try:
        parsed = datetime(
            year, month, day, hour, minute, second, millis * 1000, tzinfo=timezone.utc
        )
    except ValueError:
        return False
    return to_iso(parsed) == value


def parse_iso(value: str) -> datetime:
    """Parse a canonical ISO 8601 UTC string into an aware datetime.

    Raises ``InvalidDatetimeFormat`` for anything that is not exactly the
    output of :func:`to_iso`, including calendar-invalid dates.
    """

    if not is_valid_iso(value):
        raise InvalidDatetimeFormat(f"Invalid datetime string: {value}")
    year, month, day, hour, minute, second, millis = (
        int(part) for part in _ISO_RE.match(value).groups()
    )
    return datetime(year, month, day, hour, minute, second, millis * 1000, tzinfo=timezone.utc)


def add_months(instant: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the target month."""

    value = _as_utc(instant)
    year, month_index = _shift_months(value.year, value.month - 1, int(months))
    last_day = calendar.monthrange(year, month_index + 1)[1]
    return value.replace(year=year, month=month_index + 1, day=min(value.day, last_day))


def add_years(instant: datetime, years: int) -> datetime:
    return add_months(instant, int(years) * 12)


def add_days(instant: datetime, days: int) -> datetime:
    return _as_utc(instant) + timedelta(days=days)


def add_hours(instant: datetime, hours: float) -> datetime:
    return _as_utc(instant) + timedelta(hours=hours)


def add_minutes(instant: datetime, minutes: float) -> datetime:
    return _as_utc(instant) + timedelta(minutes=minutes)


def add_seconds(instant: datetime, seconds: float) -> datetime:
    return _as_utc(instant) + timedelta(seconds=seconds)


def add_milliseconds(instant: datetime, milliseconds: float) -> datetime:
    return _as_utc(instant) + timedelta(milliseconds=milliseconds)


def is_same_day(first: datetime, second: datetime, *, time_zone: TZ | str = TZ.UTC) -> bool:
    zone = _zone(time_zone)
    return _as_utc(first).astimezone(zone).date() == _as_utc(second).astimezone(zone).date()


def get_parts(instant: datetime, *, time_zone: TZ | str = TZ.UTC) -> DateParts:
    local = _as_utc(instant).astimezone(_zone(time_zone))
    return DateParts(
        year=local.year,
        month_index=local.month - 1,
        day=local.day,
        hour=local.hour,
        minute=local.minute,
        second=local.second,
        millisecond=local.microsecond // 1000,
    )


def format_datetime(
    instant: datetime,
    pattern: str,
    *,
    locale: LOCALES | str = LOCALES.EN,
    time_zone: TZ | str = TZ.UTC,
) -> str:
    """Render ``instant`` with an LDML pattern such as ``yyyy-MM-dd HH:mm:ss``."""

    return _babel_format_datetime(
        _as_utc(instant),
        pattern,
        tzinfo=_zone(time_zone),
        locale=LOCALES(locale).value,
    )


__all__ = [
    "DateParts",
    "InvalidDatetimeFormat",
    "LOCALES",
    "TZ",
    "add_days",
    "add_hours",
    "add_milliseconds",
    "add_minutes",
    "add_months",
    "add_seconds",
    "add_years",
    "create_date",
    "format_datetime",
    "get_parts",
    "is_same_day",
    "is_valid_iso",
    "now",
    "parse_iso",
    "to_iso",
]
