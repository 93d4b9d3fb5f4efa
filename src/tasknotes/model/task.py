# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import Collection, Optional, TypeAlias, TypedDict

import pendulum

from tasknotes.model.recurrence import RecurrenceAnchor

TaskId: TypeAlias = str


class TaskStatus(StrEnum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    DONE = "done"


DEFAULT_COMPLETED_STATUSES: frozenset[str] = frozenset({TaskStatus.DONE.value})

DEFAULT_PRIORITY_WEIGHTS: dict[str, int] = {
    "none": 0,
    "low": 1,
    "normal": 2,
    "high": 3,
}


class TaskInfo(TypedDict):
    id: TaskId
    title: str
    status: str
    priority: Optional[str]
    due: Optional[pendulum.Date | pendulum.DateTime]
    scheduled: Optional[pendulum.Date | pendulum.DateTime]
    recurrence: Optional[str]
    recurrence_anchor: RecurrenceAnchor
    complete_instances: list[pendulum.Date]
    skipped_instances: list[pendulum.Date]
    completed_date: Optional[pendulum.Date]
    tags: list[str]


def is_task_completed(
    task: TaskInfo, completed_statuses: Optional[Collection[str]] = None
) -> bool:
    """Check whether the task's status is one of the completed statuses."""
    if completed_statuses is None:
        completed_statuses = DEFAULT_COMPLETED_STATUSES
    return task["status"] in completed_statuses


def is_recurring(task: TaskInfo) -> bool:
    return task["recurrence"] is not None and task["recurrence"].strip() != ""
