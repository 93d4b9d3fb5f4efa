# SPDX-License-Identifier: MIT

import datetime
from enum import StrEnum

from tasknotes.errors import InvalidRecurrenceRule


class Weekday(StrEnum):
    MO = "MO"
    TU = "TU"
    WE = "WE"
    TH = "TH"
    FR = "FR"
    SA = "SA"
    SU = "SU"

    @property
    def position(self) -> int:
        """Position of the day with Monday as 0, matching `date.weekday()`."""
        return _WEEKDAY_ORDER.index(self)

    @classmethod
    def from_date(cls, date: datetime.date) -> "Weekday":
        return _WEEKDAY_ORDER[date.weekday()]


_WEEKDAY_ORDER: list[Weekday] = [
    Weekday.MO,
    Weekday.TU,
    Weekday.WE,
    Weekday.TH,
    Weekday.FR,
    Weekday.SA,
    Weekday.SU,
]

DEFAULT_WORK_WEEK: frozenset[Weekday] = frozenset(
    {Weekday.MO, Weekday.TU, Weekday.WE, Weekday.TH, Weekday.FR}
)


def parse_weekday(code: str) -> Weekday:
    try:
        return Weekday(code.strip().upper())
    except ValueError as e:
        raise InvalidRecurrenceRule(f"Unknown weekday code: {code!r}", code) from e


def parse_weekdays(codes: list[str]) -> frozenset[Weekday]:
    return frozenset(parse_weekday(code) for code in codes)


def ordered_weekdays(first_day: Weekday = Weekday.MO) -> list[Weekday]:
    """All seven weekdays, starting from the configured first day of the week."""
    start = first_day.position
    return _WEEKDAY_ORDER[start:] + _WEEKDAY_ORDER[:start]
