"""
Availability for one staff member on one date: resolve hours -> generate slots ->
drop past slots (today only, tenant-local time) -> mark busy slots.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable

from sqlalchemy.orm import Session

from app.config import settings
from app.core.clock import Clock, local_now, minute_of_day
from app.core.constants import STATUS_CANCELLED
from app.models.appointment import Appointment
from app.models.staff import Staff
from app.models.tenant import Tenant
from app.services.scheduling.slots import Slot, booked_times, drop_past, generate_slots, mark_busy
from app.services.scheduling.working_hours import DayHours, day_name, resolve_working_hours

logger = logging.getLogger(__name__)


@dataclass
class Availability:
    date: str
    hours: DayHours
    interval: int
    slots: list[Slot] = field(default_factory=list)

    @property
    def closed(self) -> bool:
        return self.hours.closed

    @property
    def available_times(self) -> list[str]:
        return [s.time for s in self.slots if s.available]

    def is_bookable(self, hhmm: str) -> bool:
        return hhmm[:5] in self.available_times


def tenant_offset_minutes(tenant: Tenant) -> int:
    if tenant.utc_offset_minutes is not None:
        return tenant.utc_offset_minutes
    return settings.default_utc_offset_minutes


def tenant_interval_minutes(tenant: Tenant) -> int:
    return tenant.appointment_interval_minutes or settings.default_slot_interval_minutes


def compute_availability(
    target: date,
    tenant_hours: dict | None,
    staff_hours: dict | None,
    interval: int,
    appointments: Iterable,
    now_local: datetime,
) -> Availability:
    """Pure slot computation; callers supply already-fetched rows and tenant-local now."""
    hours = resolve_working_hours(target, tenant_hours, staff_hours)
    result = Availability(date=target.isoformat(), hours=hours, interval=interval)
    if hours.closed:
        return result
    times = generate_slots(hours.start, hours.end, interval)
    times = drop_past(times, target == now_local.date(), minute_of_day(now_local))
    result.slots = mark_busy(times, booked_times(appointments))
    return result


def list_staff_appointments(db: Session, tenant_id: str, staff_id: str, date_str: str) -> list[Appointment]:
    return (
        db.query(Appointment)
        .filter(
            Appointment.tenant_id == tenant_id,
            Appointment.staff_id == staff_id,
            Appointment.date == date_str,
            Appointment.status != STATUS_CANCELLED,
        )
        .all()
    )


def get_staff_availability(db: Session, tenant: Tenant, staff: Staff, target: date, clock: Clock) -> Availability:
    appointments = list_staff_appointments(db, tenant.id, staff.id, target.isoformat())
    result = compute_availability(
        target,
        tenant.working_hours,
        staff.working_hours,
        tenant_interval_minutes(tenant),
        appointments,
        local_now(clock, tenant_offset_minutes(tenant)),
    )
    logger.debug(
        "availability tenant=%s staff=%s date=%s closed=%s free=%s/%s",
        tenant.id, staff.id, result.date, result.closed, len(result.available_times), len(result.slots),
    )
    return result


def list_open_dates(tenant: Tenant, staff: Staff | None, clock: Clock, days: int) -> list[dict]:
    """Next `days` dates from tenant-local today with open/closed flag (date picker)."""
    today = local_now(clock, tenant_offset_minutes(tenant)).date()
    out = []
    for i in range(max(days, 0)):
        d = today + timedelta(days=i)
        hours = resolve_working_hours(d, tenant.working_hours, staff.working_hours if staff else None)
        out.append({
            "date": d.isoformat(),
            "day": day_name(d),
            "open": not hours.closed,
            "start": hours.start,
            "end": hours.end,
            "reason": hours.reason,
        })
    return out
