# SPDX-License-Identifier: MIT

"""
Recurrence rule evaluation in calendar-date space.

All arithmetic works on ordinal day numbers and year/month integers, never on
instants, so DST transitions and UTC offsets cannot move an occurrence to
another day.

Monthly and yearly series skip periods that lack the target day (day 31 in a
30-day month, Feb 29 outside leap years) instead of clamping to the month end.
"""

import datetime
import logging
from typing import Iterable, Iterator, Optional

import pendulum

from tasknotes import time
from tasknotes.configuration import get_work_week
from tasknotes.errors import InvalidRecurrenceRule, MalformedRecurrence
from tasknotes.model.recurrence import Frequency, RecurrenceRule
from tasknotes.model.weekday import Weekday
from tasknotes.repository.configuration import CONFIGURATION_REPO
from tasknotes.template.recurrence import make_recurrence_rule

logger = logging.getLogger(__name__)

# The Gregorian calendar repeats every 400 years, so a monthly or yearly
# search that finds nothing within one cycle will never find anything.
_GREGORIAN_CYCLE_YEARS = 400


def is_occurrence(rule: RecurrenceRule, date: datetime.date) -> bool:
    """
    Check whether a calendar date is an occurrence of the rule.

    Raises:
        MalformedRecurrence: If the rule's parts contradict each other
    """
    check_rule_consistency(rule)
    day = time.date_part(date)

    if day < rule["start"]:
        return False
    if not __matches(rule, day):
        return False

    end = __series_end(rule)
    return end is None or day <= end


def next_occurrence_on_or_after(
    rule: RecurrenceRule, date: datetime.date
) -> Optional[pendulum.Date]:
    """
    Return the earliest occurrence on or after the date, or None when the
    series is exhausted by its count or until bound.

    Raises:
        MalformedRecurrence: If the rule's parts contradict each other
    """
    check_rule_consistency(rule)
    return __next_bounded(rule, time.date_part(date), __series_end(rule))


def occurrences_between(
    rule: RecurrenceRule, start: datetime.date, end: datetime.date
) -> Iterator[pendulum.Date]:
    """Yield every occurrence in the inclusive range [start, end]."""
    check_rule_consistency(rule)
    series_end = __series_end(rule)
    last = time.date_part(end)

    occurrence = __next_bounded(rule, time.date_part(start), series_end)
    while occurrence is not None and occurrence <= last:
        yield occurrence
        occurrence = __next_bounded(rule, occurrence.add(days=1), series_end)


def nth_occurrence(rule: RecurrenceRule, n: int) -> Optional[pendulum.Date]:
    """
    Return the n-th occurrence (1-based) of the unbounded series.

    Fixed-period series are computed directly; the others step from one
    occurrence to the next.
    """
    check_rule_consistency(rule)
    if n <= 0:
        raise ValueError(f"n must be positive, got {n}")
    return __nth_unbounded(rule, n)


def weekdays_only_rule(
    start: datetime.date, work_week: Optional[Iterable[Weekday]] = None
) -> RecurrenceRule:
    """
    Build a weekly rule firing on each day of the work week, by default the
    one in the configuration.
    """
    if work_week is None:
        work_week = get_work_week(CONFIGURATION_REPO.get_config())
    days = frozenset(work_week)
    if not days:
        raise InvalidRecurrenceRule("The work week must contain at least one day")
    return make_recurrence_rule(
        frequency=Frequency.WEEKLY,
        start=time.date_part(start),
        by_day=days,
    )


def check_rule_consistency(rule: RecurrenceRule) -> None:
    """
    Raises:
        MalformedRecurrence: If parts are combined in a way the frequency
            cannot honour
    """
    frequency = rule["frequency"]
    if rule["by_month_day"] is not None and frequency != Frequency.MONTHLY:
        raise MalformedRecurrence(
            f"BYMONTHDAY requires FREQ=MONTHLY, got FREQ={frequency.value}"
        )
    if rule["week_of_month"] is not None:
        if frequency != Frequency.MONTHLY:
            raise MalformedRecurrence(
                f"Ordinal weekdays require FREQ=MONTHLY, got FREQ={frequency.value}"
            )
        if not rule["by_day"]:
            raise MalformedRecurrence("An ordinal weekday position needs BYDAY")
    if rule["by_month_day"] is not None and rule["by_day"]:
        raise MalformedRecurrence("BYMONTHDAY and BYDAY cannot be combined")
    if frequency == Frequency.YEARLY and rule["by_day"]:
        raise MalformedRecurrence("BYDAY is not supported with FREQ=YEARLY")


def __next_bounded(
    rule: RecurrenceRule, day: pendulum.Date, series_end: Optional[pendulum.Date]
) -> Optional[pendulum.Date]:
    if day < rule["start"]:
        day = rule["start"]
    if series_end is not None and day > series_end:
        return None

    occurrence = __next_unbounded(rule, day)
    if occurrence is None:
        return None
    if series_end is not None and occurrence > series_end:
        return None
    return occurrence


def __series_end(rule: RecurrenceRule) -> Optional[pendulum.Date]:
    if rule["until"] is not None:
        return rule["until"]
    if rule["count"] is not None:
        # None here means the series runs out before reaching its count
        return __nth_unbounded(rule, rule["count"])
    return None


def __matches(rule: RecurrenceRule, day: pendulum.Date) -> bool:
    start = rule["start"]
    interval = rule["interval"]
    weekday = Weekday.from_date(day)

    match rule["frequency"]:
        case Frequency.DAILY:
            if (day.toordinal() - start.toordinal()) % interval != 0:
                return False
            return not rule["by_day"] or weekday in rule["by_day"]
        case Frequency.WEEKLY:
            if not rule["by_day"]:
                return (day.toordinal() - start.toordinal()) % (7 * interval) == 0
            return (
                weekday in rule["by_day"] and __week_index(rule, day) % interval == 0
            )
        case Frequency.MONTHLY:
            if __month_index(start, day) % interval != 0:
                return False
            return __matches_month_day(rule, day)
        case Frequency.YEARLY:
            return (
                (day.year - start.year) % interval == 0
                and day.month == start.month
                and day.day == start.day
            )
    return False


def __matches_month_day(rule: RecurrenceRule, day: pendulum.Date) -> bool:
    weekday = Weekday.from_date(day)
    if rule["week_of_month"] is not None:
        return weekday in rule["by_day"] and __is_week_of_month(
            day, rule["week_of_month"]
        )
    if rule["by_day"]:
        return weekday in rule["by_day"]
    return day.day == __target_month_day(rule)


def __next_unbounded(
    rule: RecurrenceRule, day: pendulum.Date
) -> Optional[pendulum.Date]:
    match rule["frequency"]:
        case Frequency.DAILY:
            return __next_fixed_period(rule, day, rule["interval"])
        case Frequency.WEEKLY:
            if not rule["by_day"]:
                return __next_fixed_period(rule, day, 7 * rule["interval"])
            return __next_weekly_by_day(rule, day)
        case Frequency.MONTHLY:
            return __next_monthly(rule, day)
        case Frequency.YEARLY:
            return __next_yearly(rule, day)
    return None


def __next_fixed_period(
    rule: RecurrenceRule, day: pendulum.Date, period: int
) -> Optional[pendulum.Date]:
    start_ordinal = rule["start"].toordinal()
    steps = -(-(day.toordinal() - start_ordinal) // period)
    candidate = start_ordinal + steps * period

    if not rule["by_day"]:
        return __from_ordinal(candidate)

    # The weekday of stepped dates cycles within at most seven steps
    for _ in range(7):
        if Weekday.from_date(__from_ordinal(candidate)) in rule["by_day"]:
            return __from_ordinal(candidate)
        candidate += period
    return None


def __next_weekly_by_day(
    rule: RecurrenceRule, day: pendulum.Date
) -> Optional[pendulum.Date]:
    interval = rule["interval"]
    first_week_start = __week_start_ordinal(rule["start"], rule["week_start"])
    week = __week_index(rule, day)
    active_week = -(-week // interval) * interval

    # The active week containing or following the day, then the next one
    for candidate_week in (active_week, active_week + interval):
        week_start = first_week_start + candidate_week * 7
        for offset in range(7):
            ordinal = week_start + offset
            if ordinal < day.toordinal():
                continue
            candidate = __from_ordinal(ordinal)
            if Weekday.from_date(candidate) in rule["by_day"]:
                return candidate
    return None


def __next_monthly(
    rule: RecurrenceRule, day: pendulum.Date
) -> Optional[pendulum.Date]:
    start = rule["start"]
    interval = rule["interval"]
    months = -(-__month_index(start, day) // interval) * interval
    last_month = months + _GREGORIAN_CYCLE_YEARS * 12 + interval

    while months <= last_month:
        year, month = __add_months(start, months)
        candidate = __first_match_in_month(rule, year, month, day)
        if candidate is not None:
            return candidate
        months += interval

    logger.debug("Monthly rule %s has no occurrence on or after %s", rule, day)
    return None


def __first_match_in_month(
    rule: RecurrenceRule, year: int, month: int, not_before: pendulum.Date
) -> Optional[pendulum.Date]:
    days_in_month = pendulum.date(year, month, 1).days_in_month

    if rule["week_of_month"] is not None:
        candidates = [
            __nth_weekday_of_month(year, month, weekday, rule["week_of_month"])
            for weekday in rule["by_day"]
        ]
        matching = [c for c in candidates if c is not None and c >= not_before]
        return min(matching) if matching else None

    if rule["by_day"]:
        for day_number in range(1, days_in_month + 1):
            candidate = pendulum.date(year, month, day_number)
            if candidate >= not_before and Weekday.from_date(candidate) in rule["by_day"]:
                return candidate
        return None

    target_day = __target_month_day(rule)
    if target_day > days_in_month:
        return None
    candidate = pendulum.date(year, month, target_day)
    return candidate if candidate >= not_before else None


def __next_yearly(rule: RecurrenceRule, day: pendulum.Date) -> Optional[pendulum.Date]:
    start = rule["start"]
    interval = rule["interval"]
    years = -(-(day.year - start.year) // interval) * interval
    last_year = years + _GREGORIAN_CYCLE_YEARS + interval

    while years <= last_year:
        year = start.year + years
        if start.day <= pendulum.date(year, start.month, 1).days_in_month:
            candidate = pendulum.date(year, start.month, start.day)
            if candidate >= day:
                return candidate
        years += interval
    return None


def __nth_unbounded(rule: RecurrenceRule, n: int) -> Optional[pendulum.Date]:
    start = rule["start"]
    interval = rule["interval"]
    frequency = rule["frequency"]

    if frequency == Frequency.DAILY and not rule["by_day"]:
        return start.add(days=(n - 1) * interval)

    if frequency == Frequency.WEEKLY and not rule["by_day"]:
        return start.add(days=(n - 1) * 7 * interval)

    if frequency == Frequency.WEEKLY:
        return __nth_weekly_by_day(rule, n)

    if (
        frequency == Frequency.MONTHLY
        and not rule["by_day"]
        and __target_month_day(rule) <= 28
    ):
        first_month = 0 if __target_month_day(rule) >= start.day else interval
        year, month = __add_months(start, first_month + (n - 1) * interval)
        return pendulum.date(year, month, __target_month_day(rule))

    if frequency == Frequency.YEARLY and not (start.month == 2 and start.day == 29):
        return start.add(years=(n - 1) * interval)

    occurrence = __next_unbounded(rule, start)
    for _ in range(n - 1):
        if occurrence is None:
            return None
        occurrence = __next_unbounded(rule, occurrence.add(days=1))
    return occurrence


def __nth_weekly_by_day(rule: RecurrenceRule, n: int) -> pendulum.Date:
    week_start = rule["week_start"]
    first_week_start = __week_start_ordinal(rule["start"], week_start)
    start_offset = rule["start"].toordinal() - first_week_start
    offsets = sorted((day.position - week_start.position) % 7 for day in rule["by_day"])

    first_week_offsets = [offset for offset in offsets if offset >= start_offset]
    if n <= len(first_week_offsets):
        return __from_ordinal(first_week_start + first_week_offsets[n - 1])

    remaining = n - len(first_week_offsets) - 1
    week = (1 + remaining // len(offsets)) * rule["interval"]
    return __from_ordinal(first_week_start + week * 7 + offsets[remaining % len(offsets)])


def __target_month_day(rule: RecurrenceRule) -> int:
    if rule["by_month_day"] is not None:
        return rule["by_month_day"]
    return rule["start"].day


def __week_start_ordinal(day: datetime.date, week_start: Weekday) -> int:
    return day.toordinal() - (day.weekday() - week_start.position) % 7


def __week_index(rule: RecurrenceRule, day: pendulum.Date) -> int:
    week_start = rule["week_start"]
    return (
        __week_start_ordinal(day, week_start)
        - __week_start_ordinal(rule["start"], week_start)
    ) // 7


def __month_index(start: datetime.date, day: datetime.date) -> int:
    return (day.year - start.year) * 12 + (day.month - start.month)


def __add_months(start: datetime.date, months: int) -> tuple[int, int]:
    total = start.month - 1 + months
    return start.year + total // 12, total % 12 + 1


def __nth_weekday_of_month(
    year: int, month: int, weekday: Weekday, position: int
) -> Optional[pendulum.Date]:
    first = pendulum.date(year, month, 1)
    days_in_month = first.days_in_month

    if position == -1:
        last = pendulum.date(year, month, days_in_month)
        return last.subtract(days=(last.weekday() - weekday.position) % 7)

    day_number = 1 + (weekday.position - first.weekday()) % 7 + (position - 1) * 7
    if day_number > days_in_month:
        return None
    return pendulum.date(year, month, day_number)


def __is_week_of_month(day: pendulum.Date, position: int) -> bool:
    if position == -1:
        return day.day + 7 > day.days_in_month
    return (day.day - 1) // 7 + 1 == position


def __from_ordinal(ordinal: int) -> pendulum.Date:
    day = datetime.date.fromordinal(ordinal)
    return pendulum.date(day.year, day.month, day.day)
