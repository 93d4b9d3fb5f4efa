# SPDX-License-Identifier: MIT

"""
Timezone-safe date boundaries.

Every notion of "today" and of "which calendar day does this value belong to"
goes through this module. Calendar dates are `pendulum.Date` values with no
timezone; date-times carrying a wall-clock time are `pendulum.DateTime`
values in the host's local timezone.
"""

import datetime
from enum import StrEnum
from typing import Optional, cast

import pendulum

from tasknotes.errors import InvalidTemporalValue

STORAGE_DATE_FORMAT = "YYYY-MM-DD"
STORAGE_DATETIME_FORMAT = "YYYY-MM-DD[T]HH:mm"


class DatePolicy(StrEnum):
    UTC_ANCHORED = "utc_anchored"
    ALREADY_LOCAL = "already_local"


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def now_local() -> pendulum.DateTime:
    return pendulum.now("local")


def today_local() -> pendulum.Date:
    """
    Return the current calendar date on the host's local wall clock.

    The date is read from a local-zone "now", never from the UTC fields of an
    instant: at 08:00 on Jan 2 in UTC+9 the UTC date is still Jan 1.
    """
    return now_local().date()


def calendar_date_of(
    instant: datetime.datetime | datetime.date | str, policy: DatePolicy
) -> pendulum.Date:
    """
    Extract the calendar date of a stored instant.

    Args:
        instant: A datetime (naive or aware), a date, or an ISO 8601 string
        policy: UTC_ANCHORED reads the UTC year/month/day of the instant (naive
            values are taken to be UTC). ALREADY_LOCAL reads the local
            wall-clock fields (naive values are read as they are).

    Raises:
        InvalidTemporalValue: If the instant cannot be parsed
    """
    if isinstance(instant, str):
        instant = _parse_instant(instant, policy)

    if isinstance(instant, datetime.datetime):
        if instant.tzinfo is None:
            if policy == DatePolicy.UTC_ANCHORED:
                instant = pendulum.instance(instant, tz="UTC")
            return pendulum.date(instant.year, instant.month, instant.day)

        pendulum_instant = pendulum.instance(instant)
        if policy == DatePolicy.UTC_ANCHORED:
            pendulum_instant = pendulum_instant.in_tz("UTC")
        else:
            pendulum_instant = pendulum_instant.in_tz("local")
        return pendulum_instant.date()

    if isinstance(instant, datetime.date):
        return pendulum.date(instant.year, instant.month, instant.day)

    raise InvalidTemporalValue(f"Not a temporal value: {instant!r}", instant)


def _parse_instant(text: str, policy: DatePolicy) -> pendulum.DateTime:
    tz = "UTC" if policy == DatePolicy.UTC_ANCHORED else "local"
    try:
        parsed = pendulum.parse(text.strip(), tz=tz)
    except (ValueError, TypeError) as e:
        raise InvalidTemporalValue(f"Invalid instant {text!r}: {e}", text) from e
    if not isinstance(parsed, pendulum.DateTime):
        raise InvalidTemporalValue(f"Not an instant: {text!r}", text)
    return parsed


def compare_dates(a: datetime.date, b: datetime.date) -> int:
    """Compare two calendar dates by year, month and day; returns -1, 0 or 1."""
    key_a = (a.year, a.month, a.day)
    key_b = (b.year, b.month, b.day)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def is_same_or_before(a: datetime.date, b: datetime.date) -> bool:
    return compare_dates(a, b) <= 0


def is_strictly_before(a: datetime.date, b: datetime.date) -> bool:
    return compare_dates(a, b) < 0


def parse_date_value(
    value: str | datetime.date | datetime.datetime,
) -> pendulum.Date | pendulum.DateTime:
    """
    Parse a stored due/scheduled value.

    Date-only values become a `pendulum.Date`. Values with a time become a
    `pendulum.DateTime` in the local timezone: naive times are local wall-clock
    times, values with an explicit offset are converted to local.

    Raises:
        InvalidTemporalValue: If the value cannot be parsed
    """
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            return pendulum.instance(value, tz="local")
        return pendulum.instance(value).in_tz("local")

    if isinstance(value, datetime.date):
        return pendulum.date(value.year, value.month, value.day)

    if not isinstance(value, str) or not value.strip():
        raise InvalidTemporalValue(f"Invalid date value: {value!r}", value)

    try:
        parsed = pendulum.parse(value.strip(), exact=True, tz="local")
    except (ValueError, TypeError) as e:
        raise InvalidTemporalValue(f"Invalid date value {value!r}: {e}", value) from e

    if isinstance(parsed, pendulum.DateTime):
        return parsed.in_tz("local")
    if isinstance(parsed, pendulum.Date):
        return parsed
    raise InvalidTemporalValue(f"Not a date or date-time: {value!r}", value)


def parse_date_value_optional(
    value: Optional[str | datetime.date | datetime.datetime],
) -> Optional[pendulum.Date | pendulum.DateTime]:
    if value is None:
        return None
    return parse_date_value(value)


def parse_storage_date(value: str | datetime.date) -> pendulum.Date:
    """Parse a calendar date stored as 'YYYY-MM-DD' (instance lists)."""
    parsed = parse_date_value(value)
    if isinstance(parsed, pendulum.DateTime):
        raise InvalidTemporalValue(f"Expected a date without time: {value!r}", value)
    return parsed


def has_time(value: datetime.date) -> bool:
    return isinstance(value, datetime.datetime)


def date_part(value: datetime.date) -> pendulum.Date:
    """Return the calendar date of a date or a local date-time value."""
    return pendulum.date(value.year, value.month, value.day)


def date_part_optional(value: Optional[datetime.date]) -> Optional[pendulum.Date]:
    if value is None:
        return None
    return date_part(value)


def local_datetime_of(value: datetime.date) -> pendulum.DateTime:
    """Return a local date-time; date-only values map to the local start of day."""
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            return pendulum.instance(value, tz="local")
        return pendulum.instance(value).in_tz("local")
    return pendulum.datetime(value.year, value.month, value.day, tz="local")


def format_date_for_storage(date: datetime.date) -> str:
    return date_part(date).format(STORAGE_DATE_FORMAT)


def format_value_for_storage(value: datetime.date) -> str:
    if isinstance(value, datetime.datetime):
        return local_datetime_of(value).format(STORAGE_DATETIME_FORMAT)
    return format_date_for_storage(value)


def format_value_for_storage_optional(value: Optional[datetime.date]) -> Optional[str]:
    if value is None:
        return None
    return format_value_for_storage(value)


def format_compact_date(date: datetime.date) -> str:
    return date_part(date).format("YYYYMMDD")


def with_date(
    value: pendulum.Date | pendulum.DateTime, date: pendulum.Date
) -> pendulum.Date | pendulum.DateTime:
    """Move a value to another calendar date, keeping its wall-clock time."""
    if isinstance(value, pendulum.DateTime):
        local_value = local_datetime_of(value)
        return cast(
            pendulum.DateTime,
            local_value.set(year=date.year, month=date.month, day=date.day),
        )
    return date
