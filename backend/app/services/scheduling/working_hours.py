"""
Working-hours resolution: which hours apply to a staff member on a given date.

Lookup order per weekday: staff override -> tenant week -> built-in default week
(only when the tenant never saved any hours). A day missing from a saved tenant week is closed.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from app.core.constants import DAY_NAMES, DEFAULT_WORKING_HOURS

SOURCE_STAFF = "staff"
SOURCE_TENANT = "tenant"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class DayHours:
    closed: bool
    start: str | None = None
    end: str | None = None
    reason: str | None = None
    source: str = SOURCE_TENANT

    def as_dict(self) -> dict[str, Any]:
        return {"closed": self.closed, "start": self.start, "end": self.end, "reason": self.reason, "source": self.source}


def day_name(target: date) -> str:
    """Canonical lowercase day name; date.weekday() is Monday=0, DAY_NAMES is Sunday=0."""
    return DAY_NAMES[(target.weekday() + 1) % 7]


def parse_hhmm(value: Any) -> int | None:
    """'HH:MM' (or 'HH:MM:SS') -> minutes since midnight; None when malformed."""
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 24 and 0 <= minute < 60) or (hour == 24 and minute):
        return None
    return hour * 60 + minute


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_closed_flag(value: Any) -> bool:
    # Older clients stored the flag as a string
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _closed_reason(source: str, name: str) -> str:
    label = name.capitalize()
    if source == SOURCE_STAFF:
        return f"Staff member does not work on {label}"
    return f"Business is closed on {label}"


def _entry_to_hours(entry: Mapping[str, Any] | None, source: str, name: str) -> DayHours:
    if not entry or is_closed_flag(entry.get("closed")):
        return DayHours(closed=True, reason=_closed_reason(source, name), source=source)
    start, end = parse_hhmm(entry.get("start")), parse_hhmm(entry.get("end"))
    if start is None or end is None or start >= end:
        return DayHours(
            closed=True,
            reason=f"Working hours for {name.capitalize()} are not configured correctly",
            source=source,
        )
    return DayHours(closed=False, start=format_hhmm(start), end=format_hhmm(end), source=source)


def resolve_working_hours(
    target: date,
    tenant_hours: Mapping[str, Any] | None,
    staff_hours: Mapping[str, Any] | None = None,
) -> DayHours:
    """Open/close times for target date, or a closed result with a human-readable reason."""
    name = day_name(target)
    if staff_hours and name in staff_hours:
        return _entry_to_hours(staff_hours.get(name), SOURCE_STAFF, name)
    if not tenant_hours:
        return _entry_to_hours(DEFAULT_WORKING_HOURS.get(name), SOURCE_DEFAULT, name)
    return _entry_to_hours(tenant_hours.get(name), SOURCE_TENANT, name)
