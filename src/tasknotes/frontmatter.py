# SPDX-License-Identifier: MIT

"""
Mapping between task note frontmatter and `TaskInfo`.

A task note is a markdown file that starts with a YAML block:

    ---
    title: Water plants
    status: open
    scheduled: 2025-01-15
    recurrence: DTSTART:20250115;FREQ=WEEKLY;BYDAY=WE
    complete_instances: [2025-01-15]
    ---

Reading and writing the files themselves is left to the caller.
"""

import datetime
import logging
import re
from pathlib import PurePosixPath
from typing import Any, Optional

import pendulum
from yaml import YAMLError, load

try:
    from yaml import CSafeLoader as Loader
except ImportError:
    from yaml import SafeLoader as Loader  # type: ignore[assignment]

from tasknotes import time
from tasknotes.configuration import get_recurrence_anchor
from tasknotes.errors import InvalidTemporalValue
from tasknotes.model.recurrence import RecurrenceAnchor
from tasknotes.model.task import TaskId, TaskInfo
from tasknotes.repository.configuration import CONFIGURATION_REPO
from tasknotes.template.task import get_task_template

logger = logging.getLogger(__name__)

_FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*\r?$", re.DOTALL | re.MULTILINE
)


def task_from_frontmatter(
    task_id: TaskId,
    data: dict[str, Any],
    default_anchor: Optional[RecurrenceAnchor] = None,
) -> TaskInfo:
    """
    Build a task from a frontmatter mapping.

    Missing fields take the defaults of a new task; a missing title falls back
    to the note's file name. A recurring task that names no anchor gets
    `default_anchor`, by default the configured one.

    Raises:
        InvalidTemporalValue: If due, scheduled or completedDate is not a date
    """
    task = get_task_template(task_id, PurePosixPath(task_id).stem)
    if default_anchor is None:
        default_anchor = get_recurrence_anchor(CONFIGURATION_REPO.get_config())
    task["recurrence_anchor"] = default_anchor

    if data.get("title") is not None:
        task["title"] = str(data["title"])
    if data.get("status") is not None:
        task["status"] = str(data["status"])
    if data.get("priority") is not None:
        task["priority"] = str(data["priority"])

    task["due"] = time.parse_date_value_optional(data.get("due"))
    task["scheduled"] = time.parse_date_value_optional(data.get("scheduled"))

    completed_date = time.parse_date_value_optional(data.get("completedDate"))
    task["completed_date"] = time.date_part_optional(completed_date)

    recurrence = data.get("recurrence")
    if recurrence is not None and str(recurrence).strip():
        task["recurrence"] = str(recurrence).strip()

    if data.get("recurrence_anchor") is not None:
        try:
            task["recurrence_anchor"] = RecurrenceAnchor(
                str(data["recurrence_anchor"]).strip().lower()
            )
        except ValueError:
            logger.warning(
                "Task %s has unknown recurrence_anchor %r, using %s",
                task_id,
                data["recurrence_anchor"],
                default_anchor.value,
            )

    task["complete_instances"] = __parse_instances(
        task_id, "complete_instances", data.get("complete_instances")
    )
    task["skipped_instances"] = __parse_instances(
        task_id, "skipped_instances", data.get("skipped_instances")
    )
    task["tags"] = __parse_tags(data.get("tags"))

    return task


def task_to_frontmatter(task: TaskInfo) -> dict[str, Any]:
    """
    Frontmatter mapping for a task. Dates use ``YYYY-MM-DD``, timed values
    ``YYYY-MM-DDTHH:mm`` in local time. Unset fields are left out.
    """
    data: dict[str, Any] = {"title": task["title"], "status": task["status"]}

    if task["priority"] is not None:
        data["priority"] = task["priority"]
    if task["due"] is not None:
        data["due"] = time.format_value_for_storage(task["due"])
    if task["scheduled"] is not None:
        data["scheduled"] = time.format_value_for_storage(task["scheduled"])
    if task["completed_date"] is not None:
        data["completedDate"] = time.format_date_for_storage(task["completed_date"])

    if task["recurrence"] is not None:
        data["recurrence"] = task["recurrence"]
        data["recurrence_anchor"] = task["recurrence_anchor"].value
        data["complete_instances"] = [
            time.format_date_for_storage(date)
            for date in sorted(set(task["complete_instances"]))
        ]
        data["skipped_instances"] = [
            time.format_date_for_storage(date)
            for date in sorted(set(task["skipped_instances"]))
        ]

    if task["tags"]:
        data["tags"] = list(task["tags"])

    return data


def task_from_markdown(task_id: TaskId, text: str) -> TaskInfo:
    """
    Build a task from the text of a task note.

    Raises:
        ValueError: If the note has no frontmatter block or it is not a mapping
        InvalidTemporalValue: If a date field cannot be parsed
    """
    match = _FRONTMATTER_PATTERN.match(text)
    if match is None:
        raise ValueError(f"Task note {task_id} has no frontmatter")

    try:
        data = load(match.group(1), Loader=Loader)
    except YAMLError as e:
        raise ValueError(f"Task note {task_id} has invalid frontmatter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Frontmatter of task note {task_id} is not a mapping")

    return task_from_frontmatter(task_id, data)


def __parse_instances(task_id: TaskId, field: str, value: Any) -> list[pendulum.Date]:
    if value is None:
        return []
    if isinstance(value, str | datetime.date):
        value = [value]

    dates: set[pendulum.Date] = set()
    for entry in value:
        try:
            dates.add(time.parse_storage_date(__as_date_input(entry)))
        except InvalidTemporalValue as e:
            logger.warning("Dropping %s entry %r of task %s: %s", field, entry, task_id, e)
    return sorted(dates)


def __as_date_input(entry: Any) -> str | datetime.date:
    if isinstance(entry, datetime.date):
        return entry
    return str(entry)


def __parse_tags(value: Optional[Any]) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(tag) for tag in value]
