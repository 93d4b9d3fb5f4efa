# SPDX-License-Identifier: MIT

from tasknotes.configuration import Configuration
from tasknotes.model.recurrence import RecurrenceAnchor
from tasknotes.model.task import DEFAULT_PRIORITY_WEIGHTS, TaskStatus
from tasknotes.model.weekday import Weekday, ordered_weekdays


def get_configuration_template() -> Configuration:
    return {
        "work_week": [
            day.value for day in ordered_weekdays() if day not in (Weekday.SA, Weekday.SU)
        ],
        "first_day_of_week": Weekday.MO.value,
        "completed_statuses": [TaskStatus.DONE.value],
        "hide_completed_from_overdue": True,
        "default_recurrence_anchor": RecurrenceAnchor.SCHEDULED.value,
        "priority_weights": dict(DEFAULT_PRIORITY_WEIGHTS),
        "log_level": "WARNING",
        "log_file": None,
    }
