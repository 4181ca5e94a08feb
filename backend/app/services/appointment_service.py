"""
Appointments: role-scoped listing plus the booking writer.

Booking runs check-and-insert in one transaction: the staff row is locked (FOR UPDATE where
the backend supports it), the slot is checked, then the row is inserted. The partial unique
index on (tenant, staff, date, time) for non-cancelled rows catches writers that still race;
its IntegrityError is reported as SlotUnavailableError.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.clock import Clock, local_today
from app.core.constants import APPOINTMENTS_LIST_LIMIT, STATUS_CANCELLED, STATUS_PENDING, STATUS_SCHEDULED
from app.core.errors import Forbidden, NotFoundError, SlotUnavailableError, ValidationFailed
from app.core.session import SessionContext
from app.models.appointment import ACTIVE_SLOT_INDEX, Appointment
from app.models.customer import Customer
from app.models.service import Service
from app.models.staff import Staff
from app.models.tenant import Tenant
from app.services.scheduling import get_staff_availability, parse_hhmm, tenant_offset_minutes
from app.services.tenant_scope import get_owned

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^\d{2}:\d{2}$")


def appointment_to_dict(apt: Appointment) -> dict:
    return {
        "id": apt.id,
        "tenant_id": apt.tenant_id,
        "staff_id": apt.staff_id,
        "staff_name": apt.staff.full_name if apt.staff else None,
        "customer_id": apt.customer_id,
        "customer_name": apt.customer.full_name if apt.customer else None,
        "customer_phone": apt.customer.phone if apt.customer else None,
        "service_id": apt.service_id,
        "service_name": apt.service.name if apt.service else None,
        "date": apt.date,
        "time": apt.time,
        "status": apt.status,
        "duration": apt.duration,
        "price": float(apt.price) if apt.price is not None else None,
        "notes": apt.notes,
        "reminder_sent_at": apt.reminder_sent_at.isoformat() if apt.reminder_sent_at else None,
        "created_at": apt.created_at.isoformat() if apt.created_at else None,
    }


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationFailed("date must be YYYY-MM-DD")


def check_time(value: str) -> str:
    minutes = parse_hhmm(value) if isinstance(value, str) and _TIME_RE.match(value) else None
    if minutes is None or minutes >= 24 * 60:
        raise ValidationFailed("time must be HH:MM")
    return value


def booking_window_ok(target: date, today: date, days: int) -> bool:
    """True when target lies within `days` days starting today."""
    return 0 <= (target - today).days < days


def _slot_taken(db: Session, tenant_id: str, staff_id: str, date_str: str, time_str: str, exclude_id: str | None = None) -> bool:
    q = db.query(Appointment.id).filter(
        Appointment.tenant_id == tenant_id,
        Appointment.staff_id == staff_id,
        Appointment.date == date_str,
        Appointment.time == time_str,
        Appointment.status != STATUS_CANCELLED,
    )
    if exclude_id:
        q = q.filter(Appointment.id != exclude_id)
    return q.first() is not None


def _lock_staff(db: Session, tenant_id: str, staff_id: str) -> Staff:
    staff = (
        db.query(Staff)
        .filter(Staff.id == staff_id, Staff.tenant_id == tenant_id)
        .with_for_update()
        .first()
    )
    if staff is None:
        raise NotFoundError("Staff member not found")
    return staff


# PostgreSQL names the index; SQLite lists the indexed columns instead
_SQLITE_SLOT_MESSAGE = "UNIQUE constraint failed: appointments.tenant_id, appointments.staff_id, appointments.date, appointments.time"


def is_active_slot_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return ACTIVE_SLOT_INDEX in message or _SQLITE_SLOT_MESSAGE in message


def _flush_or_conflict(db: Session) -> None:
    """Flush; a collision on the active-slot index becomes 409, other integrity errors propagate."""
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        if is_active_slot_violation(e):
            raise SlotUnavailableError()
        raise


def book_appointment(
    db: Session,
    tenant_id: str,
    *,
    staff_id: str,
    service_id: str,
    customer_id: str,
    date_str: str,
    time_str: str,
    clock: Clock,
    status: str = STATUS_PENDING,
    notes: str | None = None,
    validate_slot: bool = True,
    window_days: int | None = None,
) -> Appointment:
    """
    Create an appointment after ownership, format and slot checks.

    Raises NotFoundError when staff, service or customer is not in the tenant, ValidationFailed
    for bad input or a time outside the staff member's open slots, SlotUnavailableError when
    the slot already holds a non-cancelled appointment.
    """
    target = parse_date(date_str)
    time_str = check_time(time_str)
    tenant = db.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError("Tenant not found")
    service = get_owned(db, Service, service_id, tenant_id, "Service")
    customer = get_owned(db, Customer, customer_id, tenant_id, "Customer")
    staff = _lock_staff(db, tenant_id, staff_id)
    if staff.status != "active":
        raise ValidationFailed("Staff member is not active")

    if validate_slot:
        today = local_today(clock, tenant_offset_minutes(tenant))
        if target < today:
            raise ValidationFailed("Cannot book a date in the past")
        if window_days is not None and not booking_window_ok(target, today, window_days):
            raise ValidationFailed(f"Bookings are open for the next {window_days} days only")
        availability = get_staff_availability(db, tenant, staff, target, clock)
        if availability.closed:
            raise ValidationFailed(availability.hours.reason)
        slot = next((s for s in availability.slots if s.time == time_str), None)
        if slot is None:
            raise ValidationFailed(f"{time_str} is not a bookable time on {date_str}")
        if not slot.available:
            raise SlotUnavailableError()
    elif _slot_taken(db, tenant_id, staff.id, date_str, time_str):
        raise SlotUnavailableError()

    apt = Appointment(
        tenant_id=tenant_id,
        staff_id=staff.id,
        customer_id=customer.id,
        service_id=service.id,
        date=date_str,
        time=time_str,
        status=status,
        duration=service.duration,
        price=service.price,
        notes=notes,
    )
    db.add(apt)
    _flush_or_conflict(db)
    db.commit()
    db.refresh(apt)
    logger.info(
        "Booked appointment=%s tenant=%s staff=%s %s %s status=%s",
        apt.id, tenant_id, staff.id, date_str, time_str, status,
    )
    return apt


# --- Role-aware entry points used by the routes ---


def create_for_session(
    db: Session,
    ctx: SessionContext,
    *,
    staff_id: str,
    service_id: str,
    date_str: str,
    time_str: str,
    clock: Clock,
    customer_id: str | None = None,
    status: str | None = None,
    notes: str | None = None,
    validate_slot: bool = True,
) -> Appointment:
    """Customers book for themselves as pending; staff and owners book for a customer_id."""
    if ctx.is_customer:
        return book_appointment(
            db,
            ctx.tenant_id,
            staff_id=staff_id,
            service_id=service_id,
            customer_id=ctx.customer_id,
            date_str=date_str,
            time_str=time_str,
            clock=clock,
            status=STATUS_PENDING,
            notes=notes,
            window_days=settings.booking_window_days,
        )
    if not customer_id:
        raise ValidationFailed("customer_id is required")
    return book_appointment(
        db,
        ctx.tenant_id,
        staff_id=staff_id,
        service_id=service_id,
        customer_id=customer_id,
        date_str=date_str,
        time_str=time_str,
        clock=clock,
        status=status or STATUS_SCHEDULED,
        notes=notes,
        validate_slot=validate_slot,
    )


def list_appointments(
    db: Session,
    ctx: SessionContext,
    *,
    date_str: str | None = None,
    status: str | None = None,
    staff_id: str | None = None,
) -> list[Appointment]:
    q = db.query(Appointment).filter(Appointment.tenant_id == ctx.tenant_id)
    if ctx.is_customer:
        q = q.filter(Appointment.customer_id == ctx.customer_id)
    elif ctx.is_staff:
        q = q.filter(Appointment.staff_id == ctx.staff_id)
    elif staff_id:
        q = q.filter(Appointment.staff_id == staff_id)
    if date_str:
        q = q.filter(Appointment.date == date_str)
    if status:
        q = q.filter(Appointment.status == status)
    return q.order_by(Appointment.date.asc(), Appointment.time.asc()).limit(APPOINTMENTS_LIST_LIMIT).all()


def get_appointment(db: Session, ctx: SessionContext, appointment_id: str) -> Appointment:
    apt = db.get(Appointment, appointment_id)
    if apt is None:
        raise NotFoundError("Appointment not found")
    if apt.tenant_id != ctx.tenant_id:
        raise Forbidden("Appointment belongs to another business")
    if ctx.is_customer and apt.customer_id != ctx.customer_id:
        raise Forbidden("You can only view your own appointments")
    return apt


def update_appointment(
    db: Session,
    ctx: SessionContext,
    appointment_id: str,
    *,
    status: str | None = None,
    notes: str | None = None,
) -> Appointment:
    """
    Any status may follow any other. Customers may only cancel; staff only touch their own
    appointments. Moving out of cancelled re-claims the slot and can raise SlotUnavailableError.
    """
    apt = get_appointment(db, ctx, appointment_id)
    if ctx.is_customer:
        if status != STATUS_CANCELLED or notes is not None:
            raise ValidationFailed("Customers can only cancel appointments")
    elif ctx.is_staff and apt.staff_id != ctx.staff_id:
        raise Forbidden("You can only update your own appointments")

    previous = apt.status
    if status is not None and status != previous:
        if previous == STATUS_CANCELLED and _slot_taken(db, apt.tenant_id, apt.staff_id, apt.date, apt.time, exclude_id=apt.id):
            raise SlotUnavailableError()
        apt.status = status
    if notes is not None:
        apt.notes = notes
    _flush_or_conflict(db)
    db.commit()
    db.refresh(apt)
    if apt.status != previous:
        logger.info("Appointment %s status %s -> %s by %s", apt.id, previous, apt.status, ctx.user_type)
    return apt


def delete_appointment(db: Session, ctx: SessionContext, appointment_id: str) -> None:
    """Hard delete."""
    apt = get_appointment(db, ctx, appointment_id)
    if ctx.is_staff and apt.staff_id != ctx.staff_id:
        raise Forbidden("You can only delete your own appointments")
    db.delete(apt)
    db.commit()
    logger.info("Deleted appointment %s by %s", appointment_id, ctx.user_type)
