"""
Tenants API: admin bootstrap, public profile by slug, and owner settings.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import require_admin_key, require_owner
from app.api.schemas import WorkingHoursIn
from app.core.constants import (
    MAX_SLOT_INTERVAL_MINUTES,
    MAX_UTC_OFFSET_MINUTES,
    MIN_SLOT_INTERVAL_MINUTES,
    MIN_UTC_OFFSET_MINUTES,
)
from app.core.session import SessionContext
from app.db.session import get_db
from app.services.tenant_service import (
    create_tenant,
    get_tenant,
    get_tenant_by_slug,
    tenant_public_view,
    tenant_settings_view,
    update_settings,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class TenantCreateRequest(BaseModel):
    business_name: str = Field(..., min_length=1, max_length=256)
    slug: Optional[str] = Field(None, max_length=128, description="Defaults to a slug of business_name")
    phone: Optional[str] = None
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    working_hours: Optional[WorkingHoursIn] = None
    appointment_interval_minutes: Optional[int] = Field(None, ge=MIN_SLOT_INTERVAL_MINUTES, le=MAX_SLOT_INTERVAL_MINUTES)
    utc_offset_minutes: Optional[int] = Field(None, ge=MIN_UTC_OFFSET_MINUTES, le=MAX_UTC_OFFSET_MINUTES)


class SettingsUpdateRequest(BaseModel):
    business_name: Optional[str] = Field(None, max_length=256)
    phone: Optional[str] = None
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    working_hours: Optional[WorkingHoursIn] = None
    appointment_interval_minutes: Optional[int] = Field(None, ge=MIN_SLOT_INTERVAL_MINUTES, le=MAX_SLOT_INTERVAL_MINUTES)
    utc_offset_minutes: Optional[int] = Field(None, ge=MIN_UTC_OFFSET_MINUTES, le=MAX_UTC_OFFSET_MINUTES)


# --- Bootstrap ---


@router.post("/tenants", status_code=201, dependencies=[Depends(require_admin_key)])
def create_tenant_endpoint(body: TenantCreateRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    data = body.model_dump(exclude={"working_hours"})
    data["working_hours"] = body.working_hours.as_json() if body.working_hours else None
    tenant = create_tenant(db, **data)
    return tenant_settings_view(tenant)


@router.get("/tenants/{slug}/public")
def tenant_public(slug: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return tenant_public_view(get_tenant_by_slug(db, slug))


# --- Owner settings ---


@router.get("/settings")
def get_settings(db: Session = Depends(get_db), ctx: SessionContext = Depends(require_owner)) -> dict[str, Any]:
    return tenant_settings_view(get_tenant(db, ctx.tenant_id))


@router.patch("/settings")
def patch_settings(
    body: SettingsUpdateRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_owner),
) -> dict[str, Any]:
    changes = body.model_dump(exclude_unset=True, exclude={"working_hours"})
    if "working_hours" in body.model_fields_set:
        changes["working_hours"] = body.working_hours.as_json() if body.working_hours else None
    return tenant_settings_view(update_settings(db, ctx.tenant_id, changes))
