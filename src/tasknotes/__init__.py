# SPDX-License-Identifier: MIT

from tasknotes.errors import (
    InvalidRecurrenceRule,
    InvalidTemporalValue,
    MalformedRecurrence,
    TemporalError,
)
from tasknotes.initialize import initialize
from tasknotes.model.recurrence import Frequency, RecurrenceAnchor, RecurrenceRule
from tasknotes.model.task import TaskInfo, TaskStatus
from tasknotes.model.temporal_state import DateBasis, TemporalKind, TemporalState
from tasknotes.model.weekday import Weekday
from tasknotes.rrule import format_rule, parse_rule
from tasknotes.service.recurrence import (
    is_occurrence,
    next_occurrence_on_or_after,
    occurrences_between,
)
from tasknotes.service.temporal_state import (
    classify_for_date,
    is_overdue_as_of,
    is_overdue_time_aware,
    next_uncompleted_occurrence,
    scan_tasks,
)
from tasknotes.template.recurrence import make_recurrence_rule
from tasknotes.template.task import get_task_template
from tasknotes.time import DatePolicy, calendar_date_of, today_local

__all__ = [
    "DateBasis",
    "DatePolicy",
    "Frequency",
    "InvalidRecurrenceRule",
    "InvalidTemporalValue",
    "MalformedRecurrence",
    "RecurrenceAnchor",
    "RecurrenceRule",
    "TaskInfo",
    "TaskStatus",
    "TemporalError",
    "TemporalKind",
    "TemporalState",
    "Weekday",
    "calendar_date_of",
    "classify_for_date",
    "format_rule",
    "get_task_template",
    "initialize",
    "is_occurrence",
    "is_overdue_as_of",
    "is_overdue_time_aware",
    "make_recurrence_rule",
    "next_occurrence_on_or_after",
    "next_uncompleted_occurrence",
    "occurrences_between",
    "parse_rule",
    "scan_tasks",
    "today_local",
]
