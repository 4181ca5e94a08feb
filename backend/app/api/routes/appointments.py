"""
Appointments API. Scope follows the session: customers see their own, staff theirs,
owners everything in the business.
"""
import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import get_session, require_team
from app.core.clock import Clock, get_clock
from app.core.constants import APPOINTMENT_STATUSES
from app.core.session import SessionContext
from app.db.session import get_db
from app.services.appointment_service import (
    appointment_to_dict,
    create_for_session,
    delete_appointment,
    get_appointment,
    list_appointments,
    update_appointment,
)

router = APIRouter()
logger = logging.getLogger(__name__)

# Literal of a tuple expands to its members
AppointmentStatus = Literal[APPOINTMENT_STATUSES]


class AppointmentCreateRequest(BaseModel):
    staff_id: str
    service_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM")
    customer_id: Optional[str] = Field(None, description="Required for owner/staff bookings; ignored for customers")
    status: Optional[AppointmentStatus] = Field(None, description="Owner/staff only; defaults to scheduled")
    notes: Optional[str] = Field(None, max_length=2000)
    validate_slot: bool = Field(True, description="Owner/staff may set false to book outside generated slots")


class AppointmentUpdateRequest(BaseModel):
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)


# --- List / get ---


@router.get("")
def list_appointments_endpoint(
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    status: Optional[AppointmentStatus] = Query(None),
    staff_id: Optional[str] = Query(None, description="Owner only; staff always see their own"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session),
) -> list[dict[str, Any]]:
    rows = list_appointments(db, ctx, date_str=date, status=status, staff_id=staff_id)
    return [appointment_to_dict(a) for a in rows]


@router.get("/{appointment_id}")
def get_appointment_endpoint(
    appointment_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session),
) -> dict[str, Any]:
    return appointment_to_dict(get_appointment(db, ctx, appointment_id))


# --- Create / update / delete ---


@router.post("", status_code=201)
def create_appointment_endpoint(
    body: AppointmentCreateRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    ctx: SessionContext = Depends(get_session),
) -> dict[str, Any]:
    apt = create_for_session(
        db,
        ctx,
        staff_id=body.staff_id,
        service_id=body.service_id,
        date_str=body.date,
        time_str=body.time,
        clock=clock,
        customer_id=body.customer_id,
        status=body.status,
        notes=body.notes,
        validate_slot=body.validate_slot,
    )
    return appointment_to_dict(apt)


@router.patch("/{appointment_id}")
def update_appointment_endpoint(
    appointment_id: str,
    body: AppointmentUpdateRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session),
) -> dict[str, Any]:
    apt = update_appointment(db, ctx, appointment_id, status=body.status, notes=body.notes)
    return appointment_to_dict(apt)


@router.delete("/{appointment_id}", status_code=204)
def delete_appointment_endpoint(
    appointment_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_team),
) -> None:
    delete_appointment(db, ctx, appointment_id)
