# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import Optional, TypedDict

import pendulum


class TemporalKind(StrEnum):
    NOT_APPLICABLE = "not_applicable"
    DUE_ON = "due_on"
    SCHEDULED_ON = "scheduled_on"
    OVERDUE_SINCE = "overdue_since"
    COMPLETED_FOR_INSTANCE = "completed_for_instance"
    SKIPPED_FOR_INSTANCE = "skipped_for_instance"


class DateBasis(StrEnum):
    DUE = "due"
    SCHEDULED = "scheduled"


class TemporalState(TypedDict):
    kind: TemporalKind
    date: Optional[pendulum.Date]
    basis: Optional[DateBasis]


def not_applicable() -> TemporalState:
    return {"kind": TemporalKind.NOT_APPLICABLE, "date": None, "basis": None}


def due_on(date: pendulum.Date) -> TemporalState:
    return {"kind": TemporalKind.DUE_ON, "date": date, "basis": DateBasis.DUE}


def scheduled_on(date: pendulum.Date) -> TemporalState:
    return {
        "kind": TemporalKind.SCHEDULED_ON,
        "date": date,
        "basis": DateBasis.SCHEDULED,
    }


def overdue_since(date: pendulum.Date, basis: DateBasis) -> TemporalState:
    return {"kind": TemporalKind.OVERDUE_SINCE, "date": date, "basis": basis}


def completed_for_instance(date: pendulum.Date) -> TemporalState:
    return {"kind": TemporalKind.COMPLETED_FOR_INSTANCE, "date": date, "basis": None}


def skipped_for_instance(date: pendulum.Date) -> TemporalState:
    return {"kind": TemporalKind.SKIPPED_FOR_INSTANCE, "date": date, "basis": None}
