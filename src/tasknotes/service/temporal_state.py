# SPDX-License-Identifier: MIT

"""
Per-date classification of tasks and overdue detection.

Every function takes its reference date or instant as an argument; nothing in
here reads the clock.
"""

import datetime
import logging
from copy import deepcopy
from typing import Collection, Optional

import pendulum

from tasknotes import rrule, time
from tasknotes.errors import InvalidRecurrenceRule, MalformedRecurrence, TemporalError
from tasknotes.model.recurrence import RecurrenceAnchor, RecurrenceRule
from tasknotes.model.scan_result import ScanError, ScanResult
from tasknotes.model.task import (
    TaskId,
    TaskInfo,
    TaskStatus,
    is_recurring,
    is_task_completed,
)
from tasknotes.model.temporal_state import (
    DateBasis,
    TemporalState,
    completed_for_instance,
    due_on,
    not_applicable,
    overdue_since,
    scheduled_on,
    skipped_for_instance,
)
from tasknotes.service.recurrence import (
    is_occurrence,
    next_occurrence_on_or_after,
    occurrences_between,
)

logger = logging.getLogger(__name__)


def classify_for_date(
    task: TaskInfo,
    date: datetime.date,
    completed_statuses: Optional[Collection[str]] = None,
) -> TemporalState:
    """
    Classify a task's standing on a calendar date.

    Non-recurring tasks compare their due and scheduled dates with the date;
    an open task with either one strictly before it is overdue, otherwise a
    match on the date gives DUE_ON or SCHEDULED_ON with due taking priority.

    Recurring tasks report a completed or skipped instance first. Otherwise
    the date must be an occurrence of the rule, and the instance is due on it
    when the task has a due date, scheduled on it when it does not.

    Raises:
        MalformedRecurrence: If the task's recurrence cannot be evaluated
    """
    day = time.date_part(date)
    rule = task_rule(task)

    if rule is None:
        return __classify_single(task, day, completed_statuses)

    if day in __instance_dates(task["complete_instances"]):
        return completed_for_instance(day)
    if day in __instance_dates(task["skipped_instances"]):
        return skipped_for_instance(day)

    if is_task_completed(task, completed_statuses) or not is_occurrence(rule, day):
        return not_applicable()

    if task["due"] is not None:
        return due_on(day)
    return scheduled_on(day)


def __classify_single(
    task: TaskInfo,
    day: pendulum.Date,
    completed_statuses: Optional[Collection[str]],
) -> TemporalState:
    due = time.date_part_optional(task["due"])
    scheduled = time.date_part_optional(task["scheduled"])

    if due is None and scheduled is None:
        return not_applicable()

    if not is_task_completed(task, completed_statuses):
        if due is not None and time.is_strictly_before(due, day):
            return overdue_since(due, DateBasis.DUE)
        if scheduled is not None and time.is_strictly_before(scheduled, day):
            return overdue_since(scheduled, DateBasis.SCHEDULED)

    if due is not None and time.compare_dates(due, day) == 0:
        return due_on(day)
    if scheduled is not None and time.compare_dates(scheduled, day) == 0:
        return scheduled_on(day)
    return not_applicable()


def is_overdue_as_of(
    task: TaskInfo,
    today: datetime.date,
    completed_statuses: Optional[Collection[str]] = None,
) -> bool:
    """
    Check whether a task is overdue on the reference date.

    A recurring task is overdue while its earliest unresolved instance lies
    before today, whatever date its scheduled field currently shows. Moving
    the visible schedule forward never hides an outstanding past instance.

    Raises:
        MalformedRecurrence: If the task's recurrence cannot be evaluated
    """
    day = time.date_part(today)
    if is_task_completed(task, completed_statuses):
        return False

    rule = task_rule(task)
    if rule is None:
        return any(
            value is not None and time.is_strictly_before(time.date_part(value), day)
            for value in (task["due"], task["scheduled"])
        )

    if earliest_unresolved_instance(task, day, rule) is not None:
        return True

    # A schedule moved by hand onto a past non-occurrence date is still owed
    scheduled = time.date_part_optional(task["scheduled"])
    return (
        scheduled is not None
        and time.is_strictly_before(scheduled, day)
        and scheduled not in __resolved_dates(task)
    )


def is_overdue_time_aware(
    task: TaskInfo,
    now: datetime.datetime,
    completed_statuses: Optional[Collection[str]] = None,
) -> bool:
    """
    Check whether a task is overdue at an instant.

    Values with a time of day are compared as local instants, so a task due
    today at 23:00 is not overdue at 10:00. Date-only values are overdue from
    the following day on.

    Raises:
        MalformedRecurrence: If the task's recurrence cannot be evaluated
    """
    now_local = time.local_datetime_of(now)
    today = now_local.date()

    if is_task_completed(task, completed_statuses):
        return False

    rule = task_rule(task)
    if rule is None:
        for value in (task["due"], task["scheduled"]):
            if value is None:
                continue
            if time.has_time(value):
                if time.local_datetime_of(value) < now_local:
                    return True
            elif time.is_strictly_before(time.date_part(value), today):
                return True
        return False

    if is_overdue_as_of(task, today, completed_statuses):
        return True

    if today in __resolved_dates(task):
        return False

    scheduled = task["scheduled"]
    if (
        scheduled is not None
        and time.has_time(scheduled)
        and time.date_part(scheduled) == today
    ):
        return time.local_datetime_of(scheduled) < now_local

    start_time = rule["start_time"]
    if start_time is not None and is_occurrence(rule, today):
        instance_start = pendulum.datetime(
            today.year,
            today.month,
            today.day,
            start_time.hour,
            start_time.minute,
            start_time.second,
            tz="local",
        )
        return instance_start < now_local
    return False


def earliest_unresolved_instance(
    task: TaskInfo,
    before: datetime.date,
    rule: Optional[RecurrenceRule] = None,
) -> Optional[pendulum.Date]:
    """
    Return the first occurrence before the date that is neither completed nor
    skipped. The scan stops at the first gap, so it visits at most one more
    occurrence than there are resolved instances.
    """
    if rule is None:
        rule = task_rule(task)
    if rule is None:
        return None

    resolved = __resolved_dates(task)
    last_day = time.date_part(before).subtract(days=1)
    for occurrence in occurrences_between(rule, rule["start"], last_day):
        if occurrence not in resolved:
            return occurrence
    return None


def next_uncompleted_occurrence(
    task: TaskInfo, today: datetime.date
) -> Optional[pendulum.Date]:
    """
    Return the date the task should be scheduled on next.

    Scheduled-anchored series return the first occurrence on or after today
    that is neither completed nor skipped. Completion-anchored series restart
    from the latest completed instance and return the first later occurrence
    that has not been skipped; with no completion yet the rule's start counts.

    Raises:
        MalformedRecurrence: If the task's recurrence cannot be evaluated
    """
    rule = task_rule(task)
    if rule is None:
        return None

    if task["recurrence_anchor"] == RecurrenceAnchor.COMPLETION:
        completed = __instance_dates(task["complete_instances"])
        base = max([rule["start"], *completed])
        rule = deepcopy(rule)
        rule["start"] = base
        cursor = base.add(days=1) if base in completed else base
        resolved = __instance_dates(task["skipped_instances"])
    else:
        cursor = time.date_part(today)
        resolved = __resolved_dates(task)

    occurrence = next_occurrence_on_or_after(rule, cursor)
    while occurrence is not None and occurrence in resolved:
        occurrence = next_occurrence_on_or_after(rule, occurrence.add(days=1))
    return occurrence


def effective_status(
    task: TaskInfo,
    date: datetime.date,
    completed_status: str = TaskStatus.DONE.value,
    open_status: str = TaskStatus.OPEN.value,
) -> str:
    """
    Status to display for a task on a date. Recurring tasks are done only for
    dates whose instance was completed.
    """
    if not is_recurring(task):
        return task["status"]
    if time.date_part(date) in __instance_dates(task["complete_instances"]):
        return completed_status
    return open_status


def scan_tasks(
    tasks: list[TaskInfo],
    date: datetime.date,
    completed_statuses: Optional[Collection[str]] = None,
) -> ScanResult[dict[TaskId, TemporalState]]:
    """
    Classify many tasks for one date. A task that fails classification is
    reported as NOT_APPLICABLE and listed in the errors; the scan goes on.
    """
    states: dict[TaskId, TemporalState] = {}
    errors: list[ScanError] = []

    for task in tasks:
        try:
            states[task["id"]] = classify_for_date(task, date, completed_statuses)
        except TemporalError as e:
            logger.warning("Could not classify task %s: %s", task["id"], e)
            errors.append({"task_id": task["id"], "error": e})
            states[task["id"]] = not_applicable()

    return {"items": states, "errors": errors}


def task_rule(task: TaskInfo) -> Optional[RecurrenceRule]:
    """
    Parse a task's recurrence for evaluation.

    Raises:
        MalformedRecurrence: If the stored recurrence is not a valid rule
    """
    try:
        return rrule.rule_for_task(task)
    except InvalidRecurrenceRule as e:
        raise MalformedRecurrence(
            f"Task {task['id']} has an invalid recurrence: {e}", task["recurrence"]
        ) from e


def __instance_dates(dates: list[pendulum.Date]) -> set[pendulum.Date]:
    return {time.date_part(date) for date in dates}


def __resolved_dates(task: TaskInfo) -> set[pendulum.Date]:
    return __instance_dates(task["complete_instances"]) | __instance_dates(
        task["skipped_instances"]
    )
