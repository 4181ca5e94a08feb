"""
Customers API for owners and staff. ?search= matches name or phone.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import require_team
from app.core.session import SessionContext
from app.db.session import get_db
from app.services.customer_service import (
    create_customer,
    customer_to_dict,
    delete_customer,
    get_customer,
    list_customers,
    update_customer,
)

router = APIRouter()


class CustomerCreateRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=128)
    last_name: str = Field("", max_length=128)
    phone: str = Field(..., min_length=1, max_length=32)
    email: Optional[str] = None


class CustomerUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=128)
    last_name: Optional[str] = Field(None, max_length=128)
    phone: Optional[str] = Field(None, min_length=1, max_length=32)
    email: Optional[str] = None


@router.get("")
def list_customers_endpoint(
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_team),
) -> list[dict[str, Any]]:
    return [customer_to_dict(c) for c in list_customers(db, ctx.tenant_id, search=search)]


@router.post("", status_code=201)
def create_customer_endpoint(
    body: CustomerCreateRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_team),
) -> dict[str, Any]:
    return customer_to_dict(create_customer(db, ctx.tenant_id, body.model_dump()))


@router.get("/{customer_id}")
def get_customer_endpoint(
    customer_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_team),
) -> dict[str, Any]:
    return customer_to_dict(get_customer(db, ctx.tenant_id, customer_id))


@router.patch("/{customer_id}")
def update_customer_endpoint(
    customer_id: str,
    body: CustomerUpdateRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_team),
) -> dict[str, Any]:
    return customer_to_dict(update_customer(db, ctx.tenant_id, customer_id, body.model_dump(exclude_unset=True)))


@router.delete("/{customer_id}", status_code=204)
def delete_customer_endpoint(
    customer_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_team),
) -> None:
    delete_customer(db, ctx.tenant_id, customer_id)
