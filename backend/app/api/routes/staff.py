"""
Staff API. Owners manage staff; staff members read the list. Customers see active staff only,
in a reduced view, so they can pick who to book with.
"""
import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import get_session, require_owner, require_team
from app.api.schemas import WorkingHoursIn
from app.core.session import SessionContext
from app.db.session import get_db
from app.services.staff_service import (
    create_staff,
    delete_staff,
    get_staff,
    list_staff,
    staff_public_view,
    staff_to_dict,
    update_staff,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class StaffCreateRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=128)
    last_name: str = Field("", max_length=128)
    phone: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    working_hours: Optional[WorkingHoursIn] = None
    can_login: bool = True


class StaffUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=128)
    last_name: Optional[str] = Field(None, max_length=128)
    phone: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    working_hours: Optional[WorkingHoursIn] = Field(None, description="null clears the override")
    status: Optional[Literal["active", "inactive"]] = None
    can_login: Optional[bool] = None


def _hours_json(body: BaseModel) -> dict | None:
    return body.working_hours.as_json() if body.working_hours else None


@router.get("")
def list_staff_endpoint(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session),
) -> list[dict[str, Any]]:
    if ctx.is_customer:
        return [staff_public_view(s) for s in list_staff(db, ctx.tenant_id)]
    return [staff_to_dict(s) for s in list_staff(db, ctx.tenant_id, include_inactive=include_inactive)]


@router.post("", status_code=201)
def create_staff_endpoint(
    body: StaffCreateRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_owner),
) -> dict[str, Any]:
    data = body.model_dump(exclude={"working_hours"})
    data["working_hours"] = _hours_json(body)
    return staff_to_dict(create_staff(db, ctx.tenant_id, data))


@router.get("/{staff_id}")
def get_staff_endpoint(
    staff_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_team),
) -> dict[str, Any]:
    return staff_to_dict(get_staff(db, ctx.tenant_id, staff_id))


@router.patch("/{staff_id}")
def update_staff_endpoint(
    staff_id: str,
    body: StaffUpdateRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_owner),
) -> dict[str, Any]:
    changes = body.model_dump(exclude_unset=True, exclude={"working_hours"})
    if "working_hours" in body.model_fields_set:
        changes["working_hours"] = _hours_json(body)
    return staff_to_dict(update_staff(db, ctx.tenant_id, staff_id, changes))


@router.delete("/{staff_id}", status_code=204)
def delete_staff_endpoint(
    staff_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_owner),
) -> None:
    delete_staff(db, ctx.tenant_id, staff_id)
