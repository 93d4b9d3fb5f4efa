# SPDX-License-Identifier: MIT

"""
Day-by-day task selection for agenda and calendar style views.

Days are local calendar dates. A task with a time of day belongs to the day
its local wall-clock date falls on. Recurring tasks appear on each of their
occurrences, including ones already completed, and not on skipped ones.

A task whose recurrence cannot be evaluated is left out and reported in the
result's errors; the other tasks are unaffected.

Arguments left as None take their value from the configuration.
"""

import datetime
import logging
from typing import Collection, Optional

import pendulum

from tasknotes import time
from tasknotes.configuration import get_completed_statuses, get_first_day_of_week
from tasknotes.errors import TemporalError
from tasknotes.model.agenda import Agenda, AgendaDay
from tasknotes.model.scan_result import ScanError, ScanResult
from tasknotes.model.task import TaskInfo, is_recurring
from tasknotes.model.temporal_state import TemporalKind
from tasknotes.model.weekday import Weekday
from tasknotes.repository.configuration import CONFIGURATION_REPO
from tasknotes.service.temporal_state import classify_for_date, is_overdue_as_of

logger = logging.getLogger(__name__)


def tasks_for_date(
    tasks: list[TaskInfo],
    date: datetime.date,
    include_scheduled: bool = True,
    include_due: bool = True,
    completed_statuses: Optional[Collection[str]] = None,
) -> ScanResult[list[TaskInfo]]:
    """
    Select the tasks that have a scheduled or due date, or an instance, on
    the given day.

    Args:
        tasks: List of all tasks
        date: The local calendar date to select for
        include_scheduled: Whether to match on scheduled dates
        include_due: Whether to match on due dates
        completed_statuses: Statuses that count as completed

    Returns:
        The matching tasks in input order, and one error per task that
        could not be evaluated
    """
    day = time.date_part(date)
    if completed_statuses is None:
        completed_statuses = get_completed_statuses(CONFIGURATION_REPO.get_config())

    filtered_tasks: list[TaskInfo] = []
    errors: list[ScanError] = []
    for task in tasks:
        try:
            if __on_day(task, day, include_scheduled, include_due, completed_statuses):
                filtered_tasks.append(task)
        except TemporalError as e:
            logger.warning("Leaving task %s out of %s: %s", task["id"], day, e)
            errors.append({"task_id": task["id"], "error": e})

    return {"items": filtered_tasks, "errors": errors}


def __on_day(
    task: TaskInfo,
    day: pendulum.Date,
    include_scheduled: bool,
    include_due: bool,
    completed_statuses: Collection[str],
) -> bool:
    if is_recurring(task):
        if not (include_scheduled or include_due):
            return False
        state = classify_for_date(task, day, completed_statuses)
        return state["kind"] in (
            TemporalKind.DUE_ON,
            TemporalKind.SCHEDULED_ON,
            TemporalKind.COMPLETED_FOR_INSTANCE,
        )

    if include_scheduled and task["scheduled"] is not None:
        if time.compare_dates(time.date_part(task["scheduled"]), day) == 0:
            return True

    if include_due and task["due"] is not None:
        if time.compare_dates(time.date_part(task["due"]), day) == 0:
            return True

    return False


def overdue_tasks(
    tasks: list[TaskInfo],
    today: datetime.date,
    hide_completed: Optional[bool] = None,
    completed_statuses: Optional[Collection[str]] = None,
) -> ScanResult[list[TaskInfo]]:
    """
    Select the tasks overdue on `today`.

    With `hide_completed` off, tasks in a completed status whose dates are in
    the past are listed too.
    """
    config = CONFIGURATION_REPO.get_config()
    if hide_completed is None:
        hide_completed = bool(config["hide_completed_from_overdue"])
    if completed_statuses is None:
        completed_statuses = get_completed_statuses(config)
    statuses = completed_statuses if hide_completed else ()

    filtered_tasks: list[TaskInfo] = []
    errors: list[ScanError] = []
    for task in tasks:
        try:
            if is_overdue_as_of(task, today, statuses):
                filtered_tasks.append(task)
        except TemporalError as e:
            logger.warning("Leaving task %s out of overdue: %s", task["id"], e)
            errors.append({"task_id": task["id"], "error": e})

    return {"items": filtered_tasks, "errors": errors}


def agenda(
    tasks: list[TaskInfo],
    start: datetime.date,
    end: datetime.date,
    today: datetime.date,
    hide_completed: Optional[bool] = None,
    completed_statuses: Optional[Collection[str]] = None,
) -> Agenda:
    """
    Build an agenda for the inclusive range [start, end], one entry per day,
    with the tasks overdue on `today` listed separately. Each failing task is
    reported once, however many days it failed on.
    """
    first_day = time.date_part(start)
    last_day = time.date_part(end)
    if last_day < first_day:
        raise ValueError(f"Agenda end {last_day} is before its start {first_day}")

    if completed_statuses is None:
        completed_statuses = get_completed_statuses(CONFIGURATION_REPO.get_config())

    errors: dict[str, ScanError] = {}

    overdue_result = overdue_tasks(tasks, today, hide_completed, completed_statuses)
    for error in overdue_result["errors"]:
        errors.setdefault(error["task_id"], error)

    days: list[AgendaDay] = []
    for date in pendulum.interval(first_day, last_day).range("days"):
        day_result = tasks_for_date(
            tasks, date, completed_statuses=completed_statuses
        )
        for error in day_result["errors"]:
            errors.setdefault(error["task_id"], error)
        days.append({"date": time.date_part(date), "tasks": day_result["items"]})

    return {
        "days": days,
        "overdue": overdue_result["items"],
        "errors": list(errors.values()),
    }


def week_agenda(
    tasks: list[TaskInfo],
    date: datetime.date,
    today: datetime.date,
    first_day_of_week: Optional[Weekday] = None,
    hide_completed: Optional[bool] = None,
    completed_statuses: Optional[Collection[str]] = None,
) -> Agenda:
    """Agenda for the seven days of the week that contains `date`."""
    if first_day_of_week is None:
        first_day_of_week = get_first_day_of_week(CONFIGURATION_REPO.get_config())

    day = time.date_part(date)
    week_start = day.subtract(days=(day.weekday() - first_day_of_week.position) % 7)
    return agenda(
        tasks,
        week_start,
        week_start.add(days=6),
        today,
        hide_completed,
        completed_statuses,
    )
