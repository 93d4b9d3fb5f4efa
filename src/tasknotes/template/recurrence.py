# SPDX-License-Identifier: MIT

from typing import Iterable, Optional

import pendulum

from tasknotes.errors import InvalidRecurrenceRule
from tasknotes.model.recurrence import Frequency, RecurrenceRule
from tasknotes.model.weekday import Weekday

VALID_WEEK_OF_MONTH = (1, 2, 3, 4, 5, -1)


def make_recurrence_rule(
    frequency: Frequency,
    start: pendulum.Date,
    interval: int = 1,
    by_day: Optional[Iterable[Weekday]] = None,
    by_month_day: Optional[int] = None,
    week_of_month: Optional[int] = None,
    week_start: Weekday = Weekday.MO,
    start_time: Optional[pendulum.Time] = None,
    count: Optional[int] = None,
    until: Optional[pendulum.Date] = None,
) -> RecurrenceRule:
    """
    Build a validated recurrence rule.

    Raises:
        InvalidRecurrenceRule: If a part is out of range or count and until
            are both given
    """
    if interval <= 0:
        raise InvalidRecurrenceRule(f"Interval must be positive, got {interval}", interval)
    if by_month_day is not None and not 1 <= by_month_day <= 31:
        raise InvalidRecurrenceRule(
            f"Month day must be between 1 and 31, got {by_month_day}", by_month_day
        )
    if week_of_month is not None and week_of_month not in VALID_WEEK_OF_MONTH:
        raise InvalidRecurrenceRule(
            f"Week of month must be 1-5 or -1, got {week_of_month}", week_of_month
        )
    if count is not None and count <= 0:
        raise InvalidRecurrenceRule(f"Count must be positive, got {count}", count)
    if count is not None and until is not None:
        raise InvalidRecurrenceRule("Count and until cannot both be set")
    if until is not None and until < start:
        raise InvalidRecurrenceRule(
            f"Until {until.isoformat()} is before the start {start.isoformat()}", until
        )

    return {
        "frequency": frequency,
        "interval": interval,
        "by_day": frozenset(by_day) if by_day is not None else frozenset(),
        "by_month_day": by_month_day,
        "week_of_month": week_of_month,
        "week_start": week_start,
        "start": pendulum.date(start.year, start.month, start.day),
        "start_time": start_time,
        "count": count,
        "until": until,
    }
