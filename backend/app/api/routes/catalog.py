"""
Services API (the salon's bookable services). Everyone in the tenant reads; owners write.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import get_session, require_owner
from app.core.session import SessionContext
from app.db.session import get_db
from app.services.catalog_service import create_service, delete_service, list_services, service_to_dict, update_service

router = APIRouter()


class ServiceCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    duration: int = Field(30, ge=1, le=24 * 60, description="Minutes")
    price: float = Field(0, ge=0)
    is_active: bool = True


class ServiceUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=256)
    duration: Optional[int] = Field(None, ge=1, le=24 * 60)
    price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


@router.get("")
def list_services_endpoint(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session),
) -> list[dict[str, Any]]:
    # Customers only ever see active services
    active_only = ctx.is_customer or not include_inactive
    return [service_to_dict(s) for s in list_services(db, ctx.tenant_id, active_only=active_only)]


@router.post("", status_code=201)
def create_service_endpoint(
    body: ServiceCreateRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_owner),
) -> dict[str, Any]:
    return service_to_dict(create_service(db, ctx.tenant_id, body.model_dump()))


@router.patch("/{service_id}")
def update_service_endpoint(
    service_id: str,
    body: ServiceUpdateRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_owner),
) -> dict[str, Any]:
    return service_to_dict(update_service(db, ctx.tenant_id, service_id, body.model_dump(exclude_unset=True)))


@router.delete("/{service_id}", status_code=204)
def delete_service_endpoint(
    service_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_owner),
) -> None:
    delete_service(db, ctx.tenant_id, service_id)
