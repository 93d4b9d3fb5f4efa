# SPDX-License-Identifier: MIT

from tasknotes.model.recurrence import RecurrenceAnchor
from tasknotes.model.task import TaskId, TaskInfo, TaskStatus


def get_task_template(task_id: TaskId, title: str = "") -> TaskInfo:
    return {
        "id": task_id,
        "title": title,
        "status": TaskStatus.OPEN.value,
        "priority": None,
        "due": None,
        "scheduled": None,
        "recurrence": None,
        "recurrence_anchor": RecurrenceAnchor.SCHEDULED,
        "complete_instances": [],
        "skipped_instances": [],
        "completed_date": None,
        "tags": [],
    }
