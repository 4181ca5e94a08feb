"""
Appointment availability: working hours, slot generation and filtering.

Public API:
  - resolve_working_hours(date, tenant_hours, staff_hours) -> DayHours
  - generate_slots(start, end, interval) -> list[str]
  - compute_availability(...) -> Availability (pure)
  - get_staff_availability(db, tenant, staff, date, clock) -> Availability
  - list_open_dates(tenant, staff, clock, days) -> list[dict]
"""
from app.services.scheduling.availability import (
    Availability,
    compute_availability,
    get_staff_availability,
    list_open_dates,
    list_staff_appointments,
    tenant_interval_minutes,
    tenant_offset_minutes,
)
from app.services.scheduling.slots import Slot, booked_times, drop_past, generate_slots, mark_busy
from app.services.scheduling.working_hours import DayHours, day_name, parse_hhmm, resolve_working_hours

__all__ = [
    "Availability",
    "DayHours",
    "Slot",
    "booked_times",
    "compute_availability",
    "day_name",
    "drop_past",
    "generate_slots",
    "get_staff_availability",
    "list_open_dates",
    "list_staff_appointments",
    "mark_busy",
    "parse_hhmm",
    "resolve_working_hours",
    "tenant_interval_minutes",
    "tenant_offset_minutes",
]
