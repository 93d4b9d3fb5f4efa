# SPDX-License-Identifier: MIT

import pendulum
import pytest

from tasknotes import rrule
from tasknotes.errors import InvalidRecurrenceRule
from tasknotes.model.recurrence import Frequency
from tasknotes.model.weekday import Weekday


def test_parse_monthly_by_month_day():
    rule = rrule.parse_rule("DTSTART:20251101;FREQ=MONTHLY;BYMONTHDAY=1")

    assert rule["frequency"] == Frequency.MONTHLY
    assert rule["start"] == pendulum.date(2025, 11, 1)
    assert rule["by_month_day"] == 1
    assert rule["interval"] == 1
    assert rule["by_day"] == frozenset()
    assert rule["start_time"] is None


def test_parse_rrule_prefix_and_weekdays():
    rule = rrule.parse_rule("DTSTART:20250301;RRULE:FREQ=DAILY;BYDAY=MO,TU,WE,TH,FR")

    assert rule["frequency"] == Frequency.DAILY
    assert rule["by_day"] == frozenset(
        {Weekday.MO, Weekday.TU, Weekday.WE, Weekday.TH, Weekday.FR}
    )


def test_parse_multiline_with_start_time():
    rule = rrule.parse_rule("DTSTART:20250301T090000Z\nRRULE:FREQ=WEEKLY;BYDAY=MO")

    assert rule["start"] == pendulum.date(2025, 3, 1)
    assert rule["start_time"] == pendulum.time(9, 0, 0)
    assert rule["by_day"] == frozenset({Weekday.MO})


def test_parse_without_dtstart_uses_fallback():
    rule = rrule.parse_rule("RRULE:FREQ=DAILY", fallback_start=pendulum.date(2025, 2, 3))
    assert rule["start"] == pendulum.date(2025, 2, 3)

    with pytest.raises(InvalidRecurrenceRule):
        rrule.parse_rule("RRULE:FREQ=DAILY")


def test_parse_ordinal_weekdays():
    second_sunday = rrule.parse_rule("DTSTART:20250101;FREQ=MONTHLY;BYDAY=2SU")
    last_friday = rrule.parse_rule("DTSTART:20250101;FREQ=MONTHLY;BYDAY=-1FR")
    set_position = rrule.parse_rule("DTSTART:20250101;FREQ=MONTHLY;BYDAY=MO;BYSETPOS=3")

    assert second_sunday["week_of_month"] == 2
    assert second_sunday["by_day"] == frozenset({Weekday.SU})
    assert last_friday["week_of_month"] == -1
    assert set_position["week_of_month"] == 3


def test_parse_count_until_and_week_start():
    rule = rrule.parse_rule("DTSTART:20250101;FREQ=WEEKLY;BYDAY=SU;WKST=SU;COUNT=4")
    assert rule["week_start"] == Weekday.SU
    assert rule["count"] == 4

    rule = rrule.parse_rule("DTSTART:20250101;FREQ=DAILY;UNTIL=20250131T235959Z")
    assert rule["until"] == pendulum.date(2025, 1, 31)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "DTSTART:20250101",
        "DTSTART:20250101;FREQ=HOURLY",
        "DTSTART:20250101;FREQ=DAILY;BYHOUR=9",
        "DTSTART:20250101;FREQ=DAILY;INTERVAL=0",
        "DTSTART:20250101;FREQ=DAILY;INTERVAL=two",
        "DTSTART:20250101;FREQ=DAILY;COUNT=3;UNTIL=20250201",
        "DTSTART:20250101;FREQ=DAILY;UNTIL=20241201",
        "DTSTART:20250101;FREQ=DAILY;FREQ=WEEKLY",
        "DTSTART:20250101;FREQ=MONTHLY;BYMONTHDAY=32",
        "DTSTART:20250101;FREQ=MONTHLY;BYDAY=6MO",
        "DTSTART:20250101;FREQ=MONTHLY;BYDAY=1MO,2TU",
        "DTSTART:20250101;FREQ=MONTHLY;BYDAY=MO,TU;BYSETPOS=1",
        "DTSTART:20250101;FREQ=WEEKLY;BYDAY=XX",
        "DTSTART:20251301;FREQ=DAILY",
        "DTSTART:20250101;FREQ=DAILY;garbage",
    ],
)
def test_parse_rejects_invalid_rules(text):
    with pytest.raises(InvalidRecurrenceRule):
        rrule.parse_rule(text)


@pytest.mark.parametrize(
    "text",
    [
        "DTSTART:20250115;FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE",
        "DTSTART:20250105;FREQ=MONTHLY;BYDAY=2SU",
        "DTSTART:20250131;FREQ=MONTHLY;BYMONTHDAY=31;COUNT=5",
        "DTSTART:20250101T083000;FREQ=DAILY;UNTIL=20250301",
        "DTSTART:20250101;FREQ=WEEKLY;BYDAY=SU,SA;WKST=SU",
    ],
)
def test_format_rule_reproduces_canonical_text(text):
    rule = rrule.parse_rule(text)
    formatted = rrule.format_rule(rule)

    assert rrule.parse_rule(formatted) == rule
    if "SU,SA" not in text:
        assert formatted == text


def test_format_rule_orders_weekdays_from_monday():
    rule = rrule.parse_rule("DTSTART:20250101;FREQ=WEEKLY;BYDAY=SU,SA")
    assert rrule.format_rule(rule) == "DTSTART:20250101;FREQ=WEEKLY;BYDAY=SA,SU"


def test_parse_is_case_insensitive_and_ignores_trailing_separator():
    rule = rrule.parse_rule("dtstart:20250106;freq=weekly;byday=mo,fr;")

    assert rule["start"] == pendulum.date(2025, 1, 6)
    assert rule["frequency"] == Frequency.WEEKLY
    assert rule["by_day"] == frozenset({Weekday.MO, Weekday.FR})


@pytest.mark.parametrize(
    "text",
    [
        "DTSTART:20250101;FREQ=YEARLY;BYMONTH=3",
        "DTSTART:20250101;FREQ=MONTHLY;BYMONTHDAY=1,15",
        "DTSTART:20250101;FREQ=MONTHLY;BYDAY=MO;BYSETPOS=1,2",
        "DTSTART:20250101;FREQ=DAILY\nEXDATE:20250102",
    ],
)
def test_parse_rejects_parts_without_calendar_counterpart(text):
    with pytest.raises(InvalidRecurrenceRule):
        rrule.parse_rule(text)


def test_has_start():
    assert rrule.has_start("DTSTART:20250101;FREQ=DAILY")
    assert rrule.has_start("RRULE:FREQ=DAILY\nDTSTART;VALUE=DATE:20250101")
    assert not rrule.has_start("RRULE:FREQ=DAILY")
    assert not rrule.has_start("FREQ=MONTHLY;BYMONTHDAY=1")


def test_replace_start_keeps_time():
    assert (
        rrule.replace_start("DTSTART:20250101T090000Z;FREQ=DAILY", pendulum.date(2025, 2, 1))
        == "DTSTART:20250201T090000Z;FREQ=DAILY"
    )
    assert (
        rrule.replace_start("RRULE:FREQ=DAILY", pendulum.date(2025, 2, 1))
        == "DTSTART:20250201;FREQ=DAILY"
    )


def test_rule_for_task_anchors_on_scheduled_then_due(make_task):
    task = make_task(
        recurrence="RRULE:FREQ=WEEKLY",
        scheduled=pendulum.datetime(2025, 3, 4, 10, 0, tz="local"),
        due=pendulum.date(2025, 3, 6),
    )
    assert rrule.rule_for_task(task)["start"] == pendulum.date(2025, 3, 4)

    task["scheduled"] = None
    assert rrule.rule_for_task(task)["start"] == pendulum.date(2025, 3, 6)

    assert rrule.rule_for_task(make_task()) is None
