# SPDX-License-Identifier: MIT

from typing import Any, Mapping, Optional

from tasknotes import time
from tasknotes.configuration import get_priority_weights
from tasknotes.model.task import DEFAULT_PRIORITY_WEIGHTS, TaskInfo
from tasknotes.repository.configuration import CONFIGURATION_REPO


def sort_key(
    task: TaskInfo,
    key: str,
    priority_weights: Optional[Mapping[str, int]] = None,
) -> Any:
    """
    Comparable value of a task for one sort key, or None when it has none.

    Date keys compare as local date-times so that date-only and timed values
    sort together; a date-only value sorts at the start of its day.
    ``next_date`` is the earlier of due and scheduled.
    """
    match key:
        case "due" | "scheduled":
            value = task[key]  # type: ignore[literal-required]
            return None if value is None else time.local_datetime_of(value)
        case "next_date":
            candidates = [
                time.local_datetime_of(value)
                for value in (task["due"], task["scheduled"])
                if value is not None
            ]
            return min(candidates) if candidates else None
        case "priority":
            if priority_weights is None:
                priority_weights = DEFAULT_PRIORITY_WEIGHTS
            if task["priority"] is None:
                return None
            return priority_weights.get(task["priority"])
        case "title":
            return task["title"].lower()
    raise ValueError(f"Unknown sort key: {key!r}")


def sort_tasks(
    tasks: list[TaskInfo],
    sort_instructions: list[str],
    priority_weights: Optional[Mapping[str, int]] = None,
) -> list[TaskInfo]:
    """
    Sort tasks by instructions such as ``["asc next_date", "desc priority"]``.

    The first instruction is the primary key. Tasks without a value for a key
    go last whatever the direction. Priority weights default to the
    configured ones.
    """
    if priority_weights is None:
        priority_weights = get_priority_weights(CONFIGURATION_REPO.get_config())

    sorted_tasks = list(tasks)

    for sort_instruction in reversed(sort_instructions):
        descending = False
        column = sort_instruction.strip()
        if " " in column:
            direction, column = column.split(" ", 1)
            if direction == "desc":
                descending = True
            column = column.strip()

        keyed = [(sort_key(task, column, priority_weights), task) for task in sorted_tasks]
        none_tasks = [task for value, task in keyed if value is None]
        value_tasks = [(value, task) for value, task in keyed if value is not None]
        value_tasks.sort(key=lambda value_task: value_task[0], reverse=descending)
        sorted_tasks = [task for _, task in value_tasks] + none_tasks

    return sorted_tasks
