# SPDX-License-Identifier: MIT

import datetime
import logging
import re
from abc import ABC, abstractmethod
from typing import Collection, Optional, cast

import pendulum

from tasknotes import time
from tasknotes.configuration import get_completed_statuses
from tasknotes.errors import TemporalError
from tasknotes.model.filter import (
    BooleanFilter,
    Filter,
    Filters,
    PropertyFilter,
    PropertyNameFilter,
    SingleBooleanFilter,
    ValueFilter,
)
from tasknotes.model.task import TaskInfo, is_recurring, is_task_completed
from tasknotes.query.filter_type import FilterType
from tasknotes.query.util import split_instruction
from tasknotes.repository.configuration import CONFIGURATION_REPO
from tasknotes.service.temporal_state import is_overdue_as_of

logger = logging.getLogger(__name__)


def generate_filter(
    filter: Filters,
    today: datetime.date,
    completed_statuses: Optional[Collection[str]] = None,
) -> "Predicate":
    """
    Build a predicate tree from a filter description.

    Relative dates ("today", "yesterday", "tomorrow") and overdue checks are
    evaluated against `today`, a local calendar date supplied by the caller.
    Completed statuses default to the configured ones.
    """
    if completed_statuses is None:
        completed_statuses = get_completed_statuses(CONFIGURATION_REPO.get_config())

    filter_obj = filter_factory(filter, time.date_part(today), completed_statuses)
    if isinstance(filter_obj, And | Or):
        for child_filter_bool in cast(BooleanFilter, filter)["predicates"]:
            filter_obj.add_predicate(
                generate_filter(child_filter_bool, today, completed_statuses)
            )
    elif isinstance(filter_obj, Not):
        child_filter_single_bool = cast(SingleBooleanFilter, filter)["predicate"]
        filter_obj.set_predicate(
            generate_filter(child_filter_single_bool, today, completed_statuses)
        )
    return filter_obj


def filter_factory(
    filter: Filter,
    today: pendulum.Date,
    completed_statuses: Optional[Collection[str]] = None,
) -> "Predicate":
    match filter["filter_type"]:
        case FilterType.AND:
            return And()
        case FilterType.OR:
            return Or()
        case FilterType.NOT:
            return Not()
        case FilterType.EMPTY:
            return Empty(cast(PropertyNameFilter, filter))
        case FilterType.STR:
            return Str(cast(PropertyFilter, filter))
        case FilterType.STR_REGEX:
            return StrRegex(cast(PropertyFilter, filter))
        case FilterType.DATE:
            return Date(cast(PropertyFilter, filter), today)
        case FilterType.TAG:
            return Tag(cast(ValueFilter, filter))
        case FilterType.TAG_REGEX:
            return TagRegex(cast(ValueFilter, filter))
        case FilterType.OVERDUE:
            return Overdue(today, completed_statuses)
        case FilterType.RECURRING:
            return Recurring()
        case FilterType.COMPLETED:
            return Completed(completed_statuses)
    raise ValueError(f"Unknown filter type: {filter['filter_type']!r}")


class Predicate(ABC):
    @abstractmethod
    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]: ...


class And(Predicate):
    def __init__(self) -> None:
        self.predicates: list[Predicate] = []

    def add_predicate(self, predicate: Predicate) -> None:
        self.predicates.append(predicate)

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        result_ids = {item["id"] for item in items}
        for predicate in self.predicates:
            pred_result_ids = {pred_result["id"] for pred_result in predicate.filter(items)}
            result_ids &= pred_result_ids
        return [item for item in items if item["id"] in result_ids]


class Or(Predicate):
    def __init__(self) -> None:
        self.predicates: list[Predicate] = []

    def add_predicate(self, predicate: Predicate) -> None:
        self.predicates.append(predicate)

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        result_ids: set[str] = set()
        for predicate in self.predicates:
            result_ids |= {pred_result["id"] for pred_result in predicate.filter(items)}
        return [item for item in items if item["id"] in result_ids]


class Not(Predicate):
    def __init__(self) -> None:
        self.predicate: Optional[Predicate] = None

    def set_predicate(self, predicate: Predicate) -> None:
        self.predicate = predicate

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        if self.predicate is None:
            raise ValueError("NOT predicate cannot be None")
        predicate_item_ids = {item["id"] for item in self.predicate.filter(items)}
        return [item for item in items if item["id"] not in predicate_item_ids]


class Empty(Predicate):
    def __init__(self, property_filter: PropertyNameFilter) -> None:
        self.property_filter = property_filter

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        property = self.property_filter["property"]
        return [
            item
            for item in items
            if property in item and item.get(property) in (None, [])
        ]


class Str(Predicate):
    def __init__(self, property_filter: PropertyFilter) -> None:
        self.property_filter = property_filter

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        return [item for item in items if self.__include(item)]

    def __include(self, item: TaskInfo) -> bool:
        property = self.property_filter["property"]
        instruction, value = split_instruction(self.property_filter["filter"])

        item_value = item.get(property)
        if item_value is None:
            return False

        text = str(item_value)
        match instruction:
            case "equals":
                return text == value
            case "equals_no_case":
                return text.lower() == value.lower()
            case "contains":
                return value in text
            case "contains_no_case":
                return value.lower() in text.lower()
        raise ValueError(f"Unknown string instruction: {instruction!r}")


class StrRegex(Predicate):
    def __init__(self, property_filter: PropertyFilter) -> None:
        self.property_filter = property_filter

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        pattern = re.compile(self.property_filter["filter"])
        property = self.property_filter["property"]

        return [
            item
            for item in items
            if item.get(property) is not None and pattern.search(str(item.get(property)))
        ]


class Date(Predicate):
    """
    Compare a date field with a reference date, by calendar date only: a task
    scheduled today at 14:00 is "on today", not "after today".

    Instructions are ``on``, ``before``, ``after``, ``on_or_before`` and
    ``on_or_after``; the value is ``today``, ``yesterday``, ``tomorrow`` or a
    date such as ``2025-01-15``.
    """

    def __init__(self, property_filter: PropertyFilter, today: pendulum.Date) -> None:
        self.property_filter = property_filter
        self.today = today

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        instruction, value = split_instruction(self.property_filter["filter"])
        reference_date = self.__reference_date(value)
        return [
            item for item in items if self.__include(item, instruction, reference_date)
        ]

    def __reference_date(self, value: str) -> pendulum.Date:
        match value:
            case "today":
                return self.today
            case "yesterday":
                return self.today.subtract(days=1)
            case "tomorrow":
                return self.today.add(days=1)
        return time.date_part(time.parse_date_value(value))

    def __include(
        self, item: TaskInfo, instruction: str, reference_date: pendulum.Date
    ) -> bool:
        item_value = item.get(self.property_filter["property"])
        if item_value is None:
            return False

        comparison = time.compare_dates(
            time.date_part(cast(datetime.date, item_value)), reference_date
        )
        match instruction:
            case "on":
                return comparison == 0
            case "before":
                return comparison < 0
            case "after":
                return comparison > 0
            case "on_or_before":
                return comparison <= 0
            case "on_or_after":
                return comparison >= 0
        raise ValueError(f"Unknown date instruction: {instruction!r}")


class Tag(Predicate):
    def __init__(self, tag_filter: ValueFilter) -> None:
        self.tag_filter = tag_filter

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        return [item for item in items if self.tag_filter["filter"] in item["tags"]]


class TagRegex(Predicate):
    def __init__(self, tag_filter: ValueFilter) -> None:
        self.tag_filter = tag_filter

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        pattern = re.compile(self.tag_filter["filter"])
        return [
            item for item in items if any(pattern.search(tag) for tag in item["tags"])
        ]


class Overdue(Predicate):
    """Tasks overdue on `today`. Tasks whose recurrence is broken are left out."""

    def __init__(
        self,
        today: pendulum.Date,
        completed_statuses: Optional[Collection[str]] = None,
    ) -> None:
        self.today = today
        self.completed_statuses = completed_statuses

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        filtered_items = []

        for item in items:
            try:
                if is_overdue_as_of(item, self.today, self.completed_statuses):
                    filtered_items.append(item)
            except TemporalError as e:
                logger.warning("Skipping task %s in overdue filter: %s", item["id"], e)

        return filtered_items


class Recurring(Predicate):
    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        return [item for item in items if is_recurring(item)]


class Completed(Predicate):
    def __init__(self, completed_statuses: Optional[Collection[str]] = None) -> None:
        self.completed_statuses = completed_statuses

    def filter(self, items: list[TaskInfo]) -> list[TaskInfo]:
        return [
            item for item in items if is_task_completed(item, self.completed_statuses)
        ]
