# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import Optional, TypedDict

import pendulum

from tasknotes.model.weekday import Weekday


class Frequency(StrEnum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class RecurrenceAnchor(StrEnum):
    SCHEDULED = "scheduled"
    COMPLETION = "completion"


class RecurrenceRule(TypedDict):
    frequency: Frequency
    interval: int
    by_day: frozenset[Weekday]
    by_month_day: Optional[int]
    # nth (1..5) or last (-1) weekday of the month, paired with by_day
    week_of_month: Optional[int]
    week_start: Weekday
    start: pendulum.Date
    start_time: Optional[pendulum.Time]
    count: Optional[int]
    until: Optional[pendulum.Date]
