# SPDX-License-Identifier: MIT

"""
Parsing and formatting of the TaskNotes recurrence grammar.

Stored rules look like ``DTSTART:20251101;FREQ=MONTHLY;BYMONTHDAY=1`` or
``DTSTART:20250301;RRULE:FREQ=DAILY;BYDAY=MO,TU,WE,TH,FR``. Older notes omit
DTSTART (``RRULE:FREQ=DAILY``); the task's scheduled or due date is the anchor
then.

The RFC 5545 grammar itself is read by dateutil. Only the TaskNotes habit of
putting DTSTART on the same line as the rule is handled here.
"""

import datetime
import logging
import re
from typing import Any, Optional

import pendulum
from dateutil.rrule import DAILY, MONTHLY, WEEKLY, YEARLY, rrule, rrulestr

from tasknotes import time
from tasknotes.errors import InvalidRecurrenceRule
from tasknotes.model.recurrence import Frequency, RecurrenceRule
from tasknotes.model.task import TaskInfo, is_recurring
from tasknotes.model.weekday import Weekday, ordered_weekdays
from tasknotes.template.recurrence import make_recurrence_rule

logger = logging.getLogger(__name__)

_DTSTART_PATTERN = re.compile(
    r"(DTSTART(?:;[^:;\n]+)*:(\d{8})(T\d{6}Z?)?)[ \t]*[;\n]?", re.IGNORECASE
)

_FREQUENCIES = {
    DAILY: Frequency.DAILY,
    WEEKLY: Frequency.WEEKLY,
    MONTHLY: Frequency.MONTHLY,
    YEARLY: Frequency.YEARLY,
}

# dateutil index order, Monday = 0
_WEEKDAYS = ordered_weekdays(Weekday.MO)

# Parts dateutil understands that have no calendar-date counterpart here
_UNSUPPORTED_PARTS = (
    "bymonth",
    "byyearday",
    "byweekno",
    "byhour",
    "byminute",
    "bysecond",
)


def parse_rule(
    text: str, fallback_start: Optional[pendulum.Date] = None
) -> RecurrenceRule:
    """
    Parse a recurrence string into a validated rule.

    Args:
        text: The rule text, with or without DTSTART and RRULE: prefixes
        fallback_start: Anchor to use when the text carries no DTSTART

    Raises:
        InvalidRecurrenceRule: If a part is unknown, unsupported or invalid
    """
    if text is None or not text.strip():
        raise InvalidRecurrenceRule("Empty recurrence rule", text)

    dtstart_match = _DTSTART_PATTERN.search(text)
    if dtstart_match is None and fallback_start is None:
        raise InvalidRecurrenceRule(f"No DTSTART and no fallback anchor: {text!r}", text)

    lines: list[str] = []
    body = text
    if dtstart_match is not None:
        lines.append(dtstart_match.group(1))
        body = text[: dtstart_match.start()] + text[dtstart_match.end() :]
    lines.append("RRULE:" + ";".join(__rule_parts(body)))

    dtstart: Optional[datetime.datetime] = None
    if fallback_start is not None:
        dtstart = datetime.datetime(
            fallback_start.year, fallback_start.month, fallback_start.day
        )

    try:
        parsed = rrulestr("\n".join(lines), dtstart=dtstart, ignoretz=True)
    except ValueError as e:
        raise InvalidRecurrenceRule(f"Invalid recurrence {text!r}: {e}", text) from e

    has_time = dtstart_match is not None and dtstart_match.group(3) is not None
    rule = __from_dateutil(parsed, text, has_time)
    logger.debug("Parsed recurrence %r into %s", text, rule)
    return rule


def __rule_parts(body: str) -> list[str]:
    parts: list[str] = []
    names: set[str] = set()
    for part in re.split(r"[;\n]", body):
        part = part.strip()
        if part.upper().startswith("RRULE:"):
            part = part[len("RRULE:") :].strip()
        if not part:
            continue
        # dateutil lets a repeated part silently override the first one
        name = part.split("=", 1)[0].strip().upper()
        if name in names:
            raise InvalidRecurrenceRule(f"Duplicate rule part {name!r}", part)
        names.add(name)
        parts.append(part)

    if "FREQ" not in names:
        raise InvalidRecurrenceRule(f"Missing FREQ in {body!r}", body)
    return parts


def __from_dateutil(parsed: rrule, text: str, has_time: bool) -> RecurrenceRule:
    # _original_rule holds only the BY parts written in the rule; dateutil
    # fills the others from DTSTART. rrule.replace() reads the same fields.
    given: dict[str, Any] = parsed._original_rule

    for name in _UNSUPPORTED_PARTS:
        if given.get(name):
            raise InvalidRecurrenceRule(f"Unsupported rule part {name.upper()}", text)
    if parsed._byeaster:
        raise InvalidRecurrenceRule("Unsupported rule part BYEASTER", text)

    if parsed._freq not in _FREQUENCIES:
        raise InvalidRecurrenceRule(f"Unsupported FREQ in {text!r}", text)

    by_day, week_of_month = __by_day(given.get("byweekday"), text)

    set_positions = given.get("bysetpos")
    if set_positions:
        if week_of_month is not None:
            raise InvalidRecurrenceRule("BYSETPOS cannot be combined with ordinal BYDAY")
        if len(by_day) != 1 or len(set_positions) != 1:
            raise InvalidRecurrenceRule(
                "BYSETPOS is only supported as one position with a single BYDAY"
            )
        week_of_month = set_positions[0]

    month_days = given.get("bymonthday")
    if month_days and len(month_days) > 1:
        raise InvalidRecurrenceRule("Only a single BYMONTHDAY is supported", text)

    dtstart: datetime.datetime = parsed._dtstart
    until: Optional[datetime.datetime] = parsed._until

    return make_recurrence_rule(
        frequency=_FREQUENCIES[parsed._freq],
        start=pendulum.date(dtstart.year, dtstart.month, dtstart.day),
        interval=parsed._interval,
        by_day=by_day,
        by_month_day=month_days[0] if month_days else None,
        week_of_month=week_of_month,
        week_start=_WEEKDAYS[parsed._wkst],
        start_time=(
            pendulum.time(dtstart.hour, dtstart.minute, dtstart.second)
            if has_time
            else None
        ),
        count=parsed._count,
        until=(
            None if until is None else pendulum.date(until.year, until.month, until.day)
        ),
    )


def __by_day(
    weekdays: Optional[tuple[Any, ...]], text: str
) -> tuple[frozenset[Weekday], Optional[int]]:
    if not weekdays:
        return frozenset(), None

    ordinals = {weekday.n for weekday in weekdays}
    if len(ordinals) > 1:
        raise InvalidRecurrenceRule(f"Mixed BYDAY ordinals are not supported: {text!r}")
    return frozenset(_WEEKDAYS[weekday.weekday] for weekday in weekdays), ordinals.pop()


def rule_for_task(task: TaskInfo) -> Optional[RecurrenceRule]:
    """
    Parse the recurrence of a task, anchoring on scheduled then due when the
    rule has no DTSTART. Returns None for non-recurring tasks.
    """
    if not is_recurring(task):
        return None

    fallback = time.date_part_optional(task["scheduled"])
    if fallback is None:
        fallback = time.date_part_optional(task["due"])
    return parse_rule(str(task["recurrence"]), fallback_start=fallback)


def format_rule(rule: RecurrenceRule) -> str:
    """Format a rule back into the stored ``DTSTART:...;FREQ=...`` form."""
    dtstart = time.format_compact_date(rule["start"])
    if rule["start_time"] is not None:
        dtstart += rule["start_time"].strftime("T%H%M%S")

    parts = [f"DTSTART:{dtstart}", f"FREQ={rule['frequency'].value}"]
    if rule["interval"] != 1:
        parts.append(f"INTERVAL={rule['interval']}")
    if rule["by_day"]:
        prefix = str(rule["week_of_month"]) if rule["week_of_month"] is not None else ""
        codes = [f"{prefix}{day.value}" for day in _WEEKDAYS if day in rule["by_day"]]
        parts.append(f"BYDAY={','.join(codes)}")
    elif rule["week_of_month"] is not None:
        parts.append(f"BYSETPOS={rule['week_of_month']}")
    if rule["by_month_day"] is not None:
        parts.append(f"BYMONTHDAY={rule['by_month_day']}")
    if rule["week_start"] != Weekday.MO:
        parts.append(f"WKST={rule['week_start'].value}")
    if rule["count"] is not None:
        parts.append(f"COUNT={rule['count']}")
    if rule["until"] is not None:
        parts.append(f"UNTIL={time.format_compact_date(rule['until'])}")
    return ";".join(parts)


def has_start(text: str) -> bool:
    """Check whether a stored rule carries its own DTSTART."""
    return _DTSTART_PATTERN.search(text) is not None


def replace_start(text: str, new_start: pendulum.Date) -> str:
    """
    Rewrite the DTSTART date of a stored rule, keeping any time component.
    A rule without DTSTART gets one in front.
    """
    compact = time.format_compact_date(new_start)
    dtstart_match = _DTSTART_PATTERN.search(text)
    if dtstart_match is None:
        body = text.strip()
        if body.upper().startswith("RRULE:"):
            body = body[len("RRULE:") :]
        return f"DTSTART:{compact};{body}"

    start, end = dtstart_match.span(2)
    return text[:start] + compact + text[end:]
