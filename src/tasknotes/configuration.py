# SPDX-License-Identifier: MIT

import logging
from typing import Optional, TypedDict

import platformdirs

from tasknotes.errors import InvalidRecurrenceRule
from tasknotes.model.recurrence import RecurrenceAnchor
from tasknotes.model.task import DEFAULT_COMPLETED_STATUSES, DEFAULT_PRIORITY_WEIGHTS
from tasknotes.model.weekday import (
    DEFAULT_WORK_WEEK,
    Weekday,
    parse_weekday,
    parse_weekdays,
)

APP_NAME = "tasknotes"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"

logger = logging.getLogger(__name__)


class Configuration(TypedDict):
    work_week: list[str]
    first_day_of_week: str
    completed_statuses: list[str]
    hide_completed_from_overdue: bool
    default_recurrence_anchor: str
    priority_weights: dict[str, int]
    log_level: str
    log_file: Optional[str]


def get_work_week(config: Configuration) -> frozenset[Weekday]:
    """
    The configured working days. An empty or unreadable setting falls back to
    Monday through Friday.
    """
    try:
        work_week = parse_weekdays(config["work_week"])
    except InvalidRecurrenceRule as e:
        logger.warning("Ignoring work_week setting: %s", e)
        return DEFAULT_WORK_WEEK
    if not work_week:
        return DEFAULT_WORK_WEEK
    return work_week


def get_first_day_of_week(config: Configuration) -> Weekday:
    try:
        return parse_weekday(config["first_day_of_week"])
    except InvalidRecurrenceRule as e:
        logger.warning("Ignoring first_day_of_week setting: %s", e)
        return Weekday.MO


def get_completed_statuses(config: Configuration) -> frozenset[str]:
    statuses = config["completed_statuses"]
    if not isinstance(statuses, list) or not statuses:
        logger.warning("Ignoring completed_statuses setting: %r", statuses)
        return DEFAULT_COMPLETED_STATUSES
    return frozenset(str(status) for status in statuses)


def get_priority_weights(config: Configuration) -> dict[str, int]:
    weights = config["priority_weights"]
    if not isinstance(weights, dict) or not all(
        isinstance(weight, int) for weight in weights.values()
    ):
        logger.warning("Ignoring priority_weights setting: %r", weights)
        return dict(DEFAULT_PRIORITY_WEIGHTS)
    return {str(priority): weight for priority, weight in weights.items()}


def get_recurrence_anchor(config: Configuration) -> RecurrenceAnchor:
    """The anchor for recurring tasks whose notes do not name one."""
    try:
        return RecurrenceAnchor(str(config["default_recurrence_anchor"]).lower())
    except ValueError:
        logger.warning(
            "Ignoring default_recurrence_anchor setting: %r",
            config["default_recurrence_anchor"],
        )
        return RecurrenceAnchor.SCHEDULED
