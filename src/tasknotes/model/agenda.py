# SPDX-License-Identifier: MIT

from typing import TypedDict

import pendulum

from tasknotes.model.scan_result import ScanError
from tasknotes.model.task import TaskInfo


class AgendaDay(TypedDict):
    date: pendulum.Date
    tasks: list[TaskInfo]


class Agenda(TypedDict):
    days: list[AgendaDay]
    overdue: list[TaskInfo]
    errors: list[ScanError]
