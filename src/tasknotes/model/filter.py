# SPDX-License-Identifier: MIT

from typing import TypedDict

from tasknotes.query.filter_type import FilterType


class Filter(TypedDict):
    """A filter without arguments: OVERDUE, RECURRING or COMPLETED."""

    filter_type: FilterType


class BooleanFilter(Filter):
    predicates: list["Filters"]


class SingleBooleanFilter(Filter):
    predicate: "Filters"


class PropertyFilter(Filter):
    """
    A filter on one task field. `filter` holds an instruction and a value,
    e.g. ``"contains_no_case groceries"`` or ``"before tomorrow"``.
    """

    property: str
    filter: str


class PropertyNameFilter(Filter):
    property: str


class ValueFilter(Filter):
    filter: str


Filters = (
    BooleanFilter
    | SingleBooleanFilter
    | PropertyFilter
    | PropertyNameFilter
    | ValueFilter
    | Filter
)
