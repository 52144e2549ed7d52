"""Host-configured reminder schedules.

Stored on ``Event.reminder_schedule`` as JSON. Two shapes exist in the wild:

* legacy: ``[7, 3, 1]`` - every entry is a number of days before the event
* current: ``[{"type": "day", "value": 7}, {"type": "hour", "value": 2}]``

``decode`` upgrades the legacy shape at the boundary so nothing downstream has
to care which one it was; ``encode`` always writes the current shape.
"""

import json
import math
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from src.guests.validation import as_utc

DAY = timedelta(days=1)
HOUR = timedelta(hours=1)


class ReminderType(str, Enum):
    DAY = "day"
    HOUR = "hour"


@dataclass(frozen=True)
class ReminderSpec:
    type: ReminderType
    value: int

    def to_json(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = ReminderType(self.type).value
        return data


@dataclass(frozen=True)
class ReminderValidationResult:
    valid: bool
    error: str | None = None


REMINDER_TYPES = tuple(t.value for t in ReminderType)

DEFAULT_SCHEDULE = [ReminderSpec(type=ReminderType.DAY, value=2)]


def migrate_legacy_schedule(days: list[int]) -> list[ReminderSpec]:
    return [ReminderSpec(type=ReminderType.DAY, value=day) for day in days]


def _is_legacy(parsed: list[Any]) -> bool:
    return all(isinstance(item, int) and not isinstance(item, bool) for item in parsed)


def _is_current(parsed: list[Any]) -> bool:
    return all(
        isinstance(item, dict)
        and item.get("type") in REMINDER_TYPES
        and isinstance(item.get("value"), int)
        and not isinstance(item.get("value"), bool)
        for item in parsed
    )


def decode(raw: str | None) -> list[ReminderSpec]:
    """Parse a stored schedule. Unknown shapes and bad JSON give an empty list."""
    if not raw:
        return []

    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return []

    if not isinstance(parsed, list) or not parsed:
        return []

    if _is_legacy(parsed):
        return migrate_legacy_schedule(parsed)

    if _is_current(parsed):
        return [
            ReminderSpec(type=ReminderType(item["type"]), value=item["value"]) for item in parsed
        ]

    return []


def encode(specs: list[ReminderSpec]) -> str | None:
    if not specs:
        return None
    return json.dumps([spec.to_json() for spec in specs])


def format_reminder(spec: ReminderSpec) -> str:
    unit = "day" if spec.type == ReminderType.DAY else "hour"
    plural = "" if spec.value == 1 else "s"
    return f"{spec.value} {unit}{plural} before"


def validate(specs: list[ReminderSpec]) -> ReminderValidationResult:
    seen: set[tuple[str, int]] = set()
    for spec in specs:
        if spec.type not in REMINDER_TYPES:
            return ReminderValidationResult(valid=False, error=f"Invalid reminder type: {spec.type}")

        key = (ReminderType(spec.type).value, spec.value)
        if key in seen:
            return ReminderValidationResult(
                valid=False, error=f"Duplicate reminder: {format_reminder(spec)}"
            )
        seen.add(key)

        if spec.value <= 0:
            return ReminderValidationResult(
                valid=False, error=f"Reminder value must be positive: {format_reminder(spec)}"
            )

    return ReminderValidationResult(valid=True)


def units_until_event(spec: ReminderSpec, event_date: datetime, now: datetime) -> int:
    """Whole days or hours left before the event, rounded up."""
    remaining = as_utc(event_date) - as_utc(now)
    unit = DAY if spec.type == ReminderType.DAY else HOUR
    return math.ceil(remaining / unit)


def should_send_reminder(spec: ReminderSpec, event_date: datetime, now: datetime) -> bool:
    return units_until_event(spec, event_date, now) == spec.value
