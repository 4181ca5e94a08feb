"""
Availability API: free/busy slots for one staff member on one date, and the open-days picker.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_session
from app.config import settings
from app.core.clock import Clock, get_clock
from app.core.session import SessionContext
from app.db.session import get_db
from app.models.service import Service
from app.services.appointment_service import parse_date
from app.services.scheduling import get_staff_availability, list_open_dates
from app.services.staff_service import get_staff
from app.services.tenant_scope import get_owned
from app.services.tenant_service import get_tenant

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def staff_availability(
    staff_id: str = Query(...),
    date: str = Query(..., description="YYYY-MM-DD"),
    service_id: Optional[str] = Query(None, description="Checked for ownership; slots use the business interval"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    ctx: SessionContext = Depends(get_session),
) -> dict[str, Any]:
    target = parse_date(date)
    tenant = get_tenant(db, ctx.tenant_id)
    staff = get_staff(db, tenant.id, staff_id)
    if service_id:
        get_owned(db, Service, service_id, tenant.id, "Service")
    result = get_staff_availability(db, tenant, staff, target, clock)
    return {
        "date": result.date,
        "staff_id": staff.id,
        "closed": result.closed,
        "reason": result.hours.reason,
        "start": result.hours.start,
        "end": result.hours.end,
        "interval": result.interval,
        "slots": [s.as_dict() for s in result.slots],
        "available": result.available_times,
    }


@router.get("/dates")
def open_dates(
    staff_id: Optional[str] = Query(None),
    days: int = Query(settings.booking_window_days, ge=1, le=90),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    ctx: SessionContext = Depends(get_session),
) -> list[dict[str, Any]]:
    tenant = get_tenant(db, ctx.tenant_id)
    staff = get_staff(db, tenant.id, staff_id) if staff_id else None
    return list_open_dates(tenant, staff, clock, days)
