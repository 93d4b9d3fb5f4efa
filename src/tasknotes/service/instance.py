# SPDX-License-Identifier: MIT

"""
Completing and skipping instances of recurring tasks.

All functions return a new task and leave their input untouched.
"""

import datetime
import logging
from copy import deepcopy

import pendulum

from tasknotes import rrule, time
from tasknotes.model.recurrence import RecurrenceAnchor
from tasknotes.model.task import TaskInfo, is_recurring
from tasknotes.service.temporal_state import next_uncompleted_occurrence, task_rule

logger = logging.getLogger(__name__)


def complete_instance(
    task: TaskInfo, date: datetime.date, today: datetime.date
) -> TaskInfo:
    """
    Mark the instance on `date` as completed and move the task to its next
    occurrence. A skipped instance on the same date stops being skipped.
    Completion-anchored tasks restart their series on the completion date.
    """
    __require_recurring(task)
    day = time.date_part(date)

    updated_task = deepcopy(task)
    updated_task["complete_instances"] = __with_date(
        updated_task["complete_instances"], day
    )
    updated_task["skipped_instances"] = __without_date(
        updated_task["skipped_instances"], day
    )

    if updated_task["recurrence_anchor"] == RecurrenceAnchor.COMPLETION:
        updated_task["recurrence"] = rrule.replace_start(
            str(updated_task["recurrence"]), day
        )

    logger.debug("Completed instance %s of task %s", day, task["id"])
    return update_to_next_scheduled_occurrence(updated_task, today)


def uncomplete_instance(
    task: TaskInfo, date: datetime.date, today: datetime.date
) -> TaskInfo:
    __require_recurring(task)
    day = time.date_part(date)

    updated_task = deepcopy(task)
    updated_task["complete_instances"] = __without_date(
        updated_task["complete_instances"], day
    )

    logger.debug("Uncompleted instance %s of task %s", day, task["id"])
    return update_to_next_scheduled_occurrence(updated_task, today)


def skip_instance(
    task: TaskInfo, date: datetime.date, today: datetime.date
) -> TaskInfo:
    """
    Mark the instance on `date` as skipped and move the task to its next
    occurrence. A completed instance on the same date stops being completed.
    """
    __require_recurring(task)
    day = time.date_part(date)

    updated_task = deepcopy(task)
    updated_task["skipped_instances"] = __with_date(
        updated_task["skipped_instances"], day
    )
    updated_task["complete_instances"] = __without_date(
        updated_task["complete_instances"], day
    )

    logger.debug("Skipped instance %s of task %s", day, task["id"])
    return update_to_next_scheduled_occurrence(updated_task, today)


def unskip_instance(
    task: TaskInfo, date: datetime.date, today: datetime.date
) -> TaskInfo:
    """
    Remove the skip on `date`. When that date is today or later the task's
    schedule moves back onto it.
    """
    __require_recurring(task)
    day = time.date_part(date)

    updated_task = deepcopy(task)
    updated_task["skipped_instances"] = __without_date(
        updated_task["skipped_instances"], day
    )

    logger.debug("Unskipped instance %s of task %s", day, task["id"])
    return update_to_next_scheduled_occurrence(updated_task, today)


def update_to_next_scheduled_occurrence(
    task: TaskInfo, today: datetime.date
) -> TaskInfo:
    """
    Move the task's scheduled date to its next uncompleted occurrence.

    The scheduled time of day is kept, and the due date keeps its distance in
    days from the scheduled date. A task with only a due date has its due date
    moved instead. When the series has no further occurrence the task is
    returned unchanged.

    A rule without DTSTART is anchored on the task's dates, so the anchor is
    written into the rule before those dates move. Past instances that were
    never resolved stay part of the series.

    Raises:
        ValueError: If the task is not recurring
        MalformedRecurrence: If the task's recurrence cannot be evaluated
    """
    __require_recurring(task)
    updated_task = deepcopy(task)

    recurrence = str(task["recurrence"])
    if not rrule.has_start(recurrence):
        anchor = task_rule(task)
        if anchor is not None:
            updated_task["recurrence"] = rrule.replace_start(recurrence, anchor["start"])
            logger.debug(
                "Pinned recurrence of task %s to start %s", task["id"], anchor["start"]
            )

    next_date = next_uncompleted_occurrence(updated_task, today)
    if next_date is None:
        logger.debug("Task %s has no further occurrences", task["id"])
        return updated_task

    scheduled = task["scheduled"]
    due = task["due"]

    if scheduled is not None:
        updated_task["scheduled"] = time.with_date(scheduled, next_date)
        if due is not None:
            offset = (
                time.date_part(scheduled).diff(time.date_part(due), False).in_days()
            )
            updated_task["due"] = time.with_date(due, next_date.add(days=offset))
    elif due is not None:
        updated_task["due"] = time.with_date(due, next_date)
    else:
        updated_task["scheduled"] = next_date

    return updated_task


def __require_recurring(task: TaskInfo) -> None:
    if not is_recurring(task):
        raise ValueError(f"Task {task['id']} is not recurring")


def __with_date(dates: list[pendulum.Date], day: pendulum.Date) -> list[pendulum.Date]:
    return sorted({time.date_part(date) for date in dates} | {day})


def __without_date(
    dates: list[pendulum.Date], day: pendulum.Date
) -> list[pendulum.Date]:
    return [date for date in dates if time.date_part(date) != day]
