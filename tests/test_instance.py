# SPDX-License-Identifier: MIT

from copy import deepcopy

import pendulum
import pytest

from tasknotes.model.recurrence import RecurrenceAnchor
from tasknotes.service.instance import (
    complete_instance,
    skip_instance,
    uncomplete_instance,
    unskip_instance,
    update_to_next_scheduled_occurrence,
)
from tasknotes.service.temporal_state import is_overdue_as_of

DAILY = "DTSTART:20250101;FREQ=DAILY"


def test_complete_instance_moves_schedule_forward(make_task):
    task = make_task(recurrence=DAILY, scheduled=pendulum.date(2025, 1, 10))
    snapshot = deepcopy(task)

    updated = complete_instance(task, pendulum.date(2025, 1, 10), pendulum.date(2025, 1, 10))

    assert updated["complete_instances"] == [pendulum.date(2025, 1, 10)]
    assert updated["scheduled"] == pendulum.date(2025, 1, 11)
    assert task == snapshot


def test_complete_instance_keeps_time_and_due_offset(make_task):
    task = make_task(
        recurrence=DAILY,
        scheduled=pendulum.datetime(2025, 1, 10, 9, 30, tz="local"),
        due=pendulum.date(2025, 1, 12),
    )

    updated = complete_instance(task, pendulum.date(2025, 1, 10), pendulum.date(2025, 1, 10))

    assert updated["scheduled"] == pendulum.datetime(2025, 1, 11, 9, 30, tz="local")
    assert updated["due"] == pendulum.date(2025, 1, 13)


def test_complete_instance_due_only(make_task):
    task = make_task(recurrence=DAILY, due=pendulum.date(2025, 1, 10))

    updated = complete_instance(task, pendulum.date(2025, 1, 10), pendulum.date(2025, 1, 10))

    assert updated["due"] == pendulum.date(2025, 1, 11)
    assert updated["scheduled"] is None


def test_complete_then_uncomplete_restores_schedule(make_task):
    task = make_task(recurrence=DAILY, scheduled=pendulum.date(2025, 1, 10))
    today = pendulum.date(2025, 1, 10)

    completed = complete_instance(task, today, today)
    restored = uncomplete_instance(completed, today, today)

    assert restored["complete_instances"] == []
    assert restored["scheduled"] == pendulum.date(2025, 1, 10)


def test_skip_replaces_completion(make_task):
    task = make_task(
        recurrence=DAILY,
        scheduled=pendulum.date(2025, 1, 11),
        complete_instances=[pendulum.date(2025, 1, 10)],
    )

    updated = skip_instance(task, pendulum.date(2025, 1, 10), pendulum.date(2025, 1, 10))

    assert updated["complete_instances"] == []
    assert updated["skipped_instances"] == [pendulum.date(2025, 1, 10)]
    assert updated["scheduled"] == pendulum.date(2025, 1, 11)


def test_unskip_reverts_schedule_to_unskipped_date(make_task):
    # 2025-01-06 is a Monday
    task = make_task(
        recurrence="DTSTART:20250106;FREQ=WEEKLY",
        scheduled=pendulum.date(2025, 1, 13),
    )
    today = pendulum.date(2025, 1, 10)

    skipped = skip_instance(task, pendulum.date(2025, 1, 13), today)
    assert skipped["scheduled"] == pendulum.date(2025, 1, 20)

    unskipped = unskip_instance(skipped, pendulum.date(2025, 1, 13), today)
    assert unskipped["skipped_instances"] == []
    assert unskipped["scheduled"] == pendulum.date(2025, 1, 13)


def test_completion_anchor_restarts_series(make_task):
    task = make_task(
        recurrence="DTSTART:20250101;FREQ=DAILY;INTERVAL=3",
        recurrence_anchor=RecurrenceAnchor.COMPLETION,
        scheduled=pendulum.date(2025, 1, 1),
    )

    updated = complete_instance(task, pendulum.date(2025, 1, 5), pendulum.date(2025, 1, 5))

    assert updated["recurrence"] == "DTSTART:20250105;FREQ=DAILY;INTERVAL=3"
    assert updated["scheduled"] == pendulum.date(2025, 1, 8)


def test_exhausted_series_keeps_schedule(make_task):
    task = make_task(
        recurrence="DTSTART:20250101;FREQ=DAILY;COUNT=1",
        scheduled=pendulum.date(2025, 1, 1),
    )

    updated = complete_instance(task, pendulum.date(2025, 1, 1), pendulum.date(2025, 1, 1))

    assert updated["complete_instances"] == [pendulum.date(2025, 1, 1)]
    assert updated["scheduled"] == pendulum.date(2025, 1, 1)


def test_update_without_dates_sets_scheduled(make_task):
    task = make_task(recurrence=DAILY)

    updated = update_to_next_scheduled_occurrence(task, pendulum.date(2025, 2, 1))

    assert updated["scheduled"] == pendulum.date(2025, 2, 1)


@pytest.mark.parametrize(
    "command", [complete_instance, uncomplete_instance, skip_instance, unskip_instance]
)
def test_instance_commands_require_recurrence(make_task, command):
    task = make_task(scheduled=pendulum.date(2025, 1, 1))

    with pytest.raises(ValueError):
        command(task, pendulum.date(2025, 1, 1), pendulum.date(2025, 1, 1))


def test_skip_keeps_unresolved_past_instance_of_rule_without_dtstart(make_task):
    task = make_task(recurrence="RRULE:FREQ=DAILY", scheduled=pendulum.date(2025, 11, 1))
    today = pendulum.date(2025, 11, 3)
    assert is_overdue_as_of(task, today)

    updated = skip_instance(task, pendulum.date(2025, 11, 2), today)

    assert updated["recurrence"] == "DTSTART:20251101;FREQ=DAILY"
    assert updated["scheduled"] == pendulum.date(2025, 11, 3)
    assert is_overdue_as_of(updated, today)


def test_advancing_schedule_pins_start_of_rule_without_dtstart(make_task):
    task = make_task(
        recurrence="FREQ=MONTHLY;BYMONTHDAY=1", scheduled=pendulum.date(2025, 11, 1)
    )
    today = pendulum.date(2025, 11, 3)

    advanced = update_to_next_scheduled_occurrence(task, today)

    assert advanced["recurrence"] == "DTSTART:20251101;FREQ=MONTHLY;BYMONTHDAY=1"
    assert advanced["scheduled"] == pendulum.date(2025, 12, 1)
    assert is_overdue_as_of(advanced, today)

    completed = complete_instance(advanced, pendulum.date(2025, 11, 1), today)
    assert not is_overdue_as_of(completed, today)
    assert completed["scheduled"] == pendulum.date(2025, 12, 1)


def test_rule_with_dtstart_is_left_as_written(make_task):
    task = make_task(recurrence=DAILY, scheduled=pendulum.date(2025, 1, 10))

    updated = update_to_next_scheduled_occurrence(task, pendulum.date(2025, 1, 12))

    assert updated["recurrence"] == DAILY
