# SPDX-License-Identifier: MIT

from typing import Any


class TemporalError(Exception):
    """Base class for every error raised by the temporal core."""

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class InvalidTemporalValue(TemporalError):
    """A date, date-time or instant could not be parsed."""


class InvalidRecurrenceRule(TemporalError):
    """A recurrence rule failed validation when it was parsed or constructed."""


class MalformedRecurrence(TemporalError):
    """A recurrence rule parsed but its parts contradict each other."""
