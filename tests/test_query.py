# SPDX-License-Identifier: MIT

import pendulum
import pytest

from tasknotes.query.agenda import agenda, overdue_tasks, tasks_for_date
from tasknotes.query.filter import generate_filter
from tasknotes.query.filter_type import FilterType
from tasknotes.query.sort import sort_key, sort_tasks

TODAY = pendulum.date(2025, 1, 10)
BROKEN_RECURRENCE = "DTSTART:20250101;FREQ=DAILY;BYMONTHDAY=5"


def _ids(tasks):
    return [task["id"] for task in tasks]


@pytest.fixture
def tasks(make_task):
    return [
        make_task(
            "a",
            title="Call plumber",
            scheduled=pendulum.datetime(2025, 1, 10, 14, 0, tz="local"),
            tags=["home"],
            priority="high",
        ),
        make_task(
            "b",
            title="Write report",
            scheduled=pendulum.date(2025, 1, 11),
            due=pendulum.date(2025, 1, 9),
            tags=["work"],
            priority="low",
        ),
        make_task("c", title="Read book", tags=["home", "leisure"]),
        make_task(
            "d",
            title="Pay rent",
            due=pendulum.date(2025, 1, 5),
            status="done",
            tags=["home"],
            priority="normal",
        ),
        make_task(
            "e",
            title="Water plants",
            recurrence="DTSTART:20250106;FREQ=WEEKLY;BYDAY=MO,TH",
            scheduled=pendulum.date(2025, 1, 13),
            complete_instances=[pendulum.date(2025, 1, 6)],
        ),
    ]


@pytest.mark.parametrize(
    "instruction, expected",
    [
        ("on today", ["a"]),
        ("after today", ["b", "e"]),
        ("before tomorrow", ["a"]),
        ("on_or_before today", ["a"]),
        ("on 2025-01-11", ["b"]),
        ("on_or_after yesterday", ["a", "b", "e"]),
    ],
)
def test_date_filter_compares_calendar_dates(tasks, instruction, expected):
    predicate = generate_filter(
        {"filter_type": FilterType.DATE, "property": "scheduled", "filter": instruction},
        TODAY,
    )

    assert _ids(predicate.filter(tasks)) == expected


def test_overdue_filter(tasks):
    predicate = generate_filter({"filter_type": FilterType.OVERDUE}, TODAY)

    # "e" still owes its Thursday Jan 9 instance
    assert _ids(predicate.filter(tasks)) == ["b", "e"]


def test_overdue_filter_leaves_out_broken_tasks(tasks, make_task):
    broken = make_task("broken", recurrence=BROKEN_RECURRENCE)
    predicate = generate_filter({"filter_type": FilterType.OVERDUE}, TODAY)

    assert _ids(predicate.filter(tasks + [broken])) == ["b", "e"]


def test_boolean_filters(tasks):
    predicate = generate_filter(
        {
            "filter_type": FilterType.AND,
            "predicates": [
                {"filter_type": FilterType.TAG, "filter": "home"},
                {
                    "filter_type": FilterType.NOT,
                    "predicate": {"filter_type": FilterType.COMPLETED},
                },
            ],
        },
        TODAY,
    )
    assert _ids(predicate.filter(tasks)) == ["a", "c"]

    predicate = generate_filter(
        {
            "filter_type": FilterType.OR,
            "predicates": [
                {"filter_type": FilterType.RECURRING},
                {"filter_type": FilterType.TAG_REGEX, "filter": "^lei"},
                {"filter_type": FilterType.RECURRING},
            ],
        },
        TODAY,
    )
    assert _ids(predicate.filter(tasks)) == ["c", "e"]


def test_string_and_empty_filters(tasks):
    contains = generate_filter(
        {"filter_type": FilterType.STR, "property": "title", "filter": "contains_no_case RE"},
        TODAY,
    )
    regex = generate_filter(
        {"filter_type": FilterType.STR_REGEX, "property": "title", "filter": "^(Pay|Read)"},
        TODAY,
    )
    empty = generate_filter({"filter_type": FilterType.EMPTY, "property": "due"}, TODAY)

    assert _ids(contains.filter(tasks)) == ["b", "c", "d"]
    assert _ids(regex.filter(tasks)) == ["c", "d"]
    assert _ids(empty.filter(tasks)) == ["a", "c", "e"]


def test_unknown_filter_type_is_rejected():
    with pytest.raises(ValueError):
        generate_filter({"filter_type": "bogus"}, TODAY)  # type: ignore[typeddict-item]


def test_sort_by_next_date_puts_undated_last(tasks):
    assert _ids(sort_tasks(tasks, ["asc next_date"])) == ["d", "b", "a", "e", "c"]
    assert _ids(sort_tasks(tasks, ["desc next_date"])) == ["e", "a", "b", "d", "c"]


def test_sort_by_priority_then_title(tasks):
    assert _ids(sort_tasks(tasks, ["desc priority", "asc title"])) == [
        "a",
        "d",
        "b",
        "c",
        "e",
    ]


def test_sort_key_uses_configured_weights(tasks):
    weights = {"low": 10, "normal": 5, "high": 1}

    assert sort_key(tasks[1], "priority", weights) == 10
    assert sort_key(tasks[2], "priority", weights) is None
    with pytest.raises(ValueError):
        sort_key(tasks[0], "colour")


def test_tasks_for_date(tasks):
    assert _ids(tasks_for_date(tasks, TODAY)["items"]) == ["a"]
    assert _ids(tasks_for_date(tasks, pendulum.date(2025, 1, 9))["items"]) == ["b", "e"]
    assert _ids(
        tasks_for_date(tasks, pendulum.date(2025, 1, 9), include_due=False)["items"]
    ) == ["e"]
    # completed instances still show on their day
    assert _ids(tasks_for_date(tasks, pendulum.date(2025, 1, 6))["items"]) == ["e"]


def test_overdue_tasks_can_include_completed(tasks):
    assert _ids(overdue_tasks(tasks, TODAY)["items"]) == ["b", "e"]
    assert _ids(overdue_tasks(tasks, TODAY, hide_completed=False)["items"]) == [
        "b",
        "d",
        "e",
    ]


def test_agenda_groups_days_and_reports_each_error_once(tasks, make_task):
    broken = make_task("broken", recurrence=BROKEN_RECURRENCE)

    result = agenda(tasks + [broken], TODAY, pendulum.date(2025, 1, 13), TODAY)

    assert [day["date"] for day in result["days"]] == [
        pendulum.date(2025, 1, 10),
        pendulum.date(2025, 1, 11),
        pendulum.date(2025, 1, 12),
        pendulum.date(2025, 1, 13),
    ]
    assert [_ids(day["tasks"]) for day in result["days"]] == [["a"], ["b"], [], ["e"]]
    assert _ids(result["overdue"]) == ["b", "e"]
    assert [error["task_id"] for error in result["errors"]] == ["broken"]


def test_agenda_rejects_reversed_range(tasks):
    with pytest.raises(ValueError):
        agenda(tasks, TODAY, pendulum.date(2025, 1, 9), TODAY)
