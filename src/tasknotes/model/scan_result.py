# SPDX-License-Identifier: MIT

from typing import Generic, TypeVar, TypedDict

from tasknotes.errors import TemporalError
from tasknotes.model.task import TaskId

T = TypeVar("T")


class ScanError(TypedDict):
    task_id: TaskId
    error: TemporalError


class ScanResult(TypedDict, Generic[T]):
    items: T
    errors: list[ScanError]
