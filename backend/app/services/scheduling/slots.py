"""
Slot generation and filtering.

Slots are start times at a fixed interval inside the open hours (end exclusive). Busy slots are
those whose HH:MM equals the start of a non-cancelled appointment; service duration is not
used to block following slots.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from app.core.constants import STATUS_CANCELLED
from app.services.scheduling.working_hours import format_hhmm, parse_hhmm


@dataclass(frozen=True)
class Slot:
    time: str
    available: bool = True

    def as_dict(self) -> dict:
        return {"time": self.time, "available": self.available}


def generate_slots(start: str, end: str, interval: int) -> list[str]:
    """
    Start times from start (inclusive) to end (exclusive) every interval minutes.
    Empty when interval <= 0, start >= end, or either bound is malformed.
    """
    start_min, end_min = parse_hhmm(start), parse_hhmm(end)
    if start_min is None or end_min is None or interval <= 0 or start_min >= end_min:
        return []
    return [format_hhmm(m) for m in range(start_min, end_min, interval)]


def booked_times(appointments: Iterable) -> set[str]:
    """HH:MM starts of appointments that still hold their slot (anything but cancelled)."""
    booked = set()
    for apt in appointments:
        status = getattr(apt, "status", None)
        value = getattr(apt, "time", None)
        if status == STATUS_CANCELLED or not value:
            continue
        booked.add(value[:5])
    return booked


def drop_past(times: list[str], is_today: bool, now_minute: int) -> list[str]:
    """For today, keep only slots strictly after the current minute."""
    if not is_today:
        return list(times)
    return [t for t in times if parse_hhmm(t) > now_minute]


def mark_busy(times: list[str], booked: set[str]) -> list[Slot]:
    return [Slot(time=t, available=t not in booked) for t in times]
