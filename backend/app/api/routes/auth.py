"""
Auth API: owner/staff password login, phone OTP login, tenant switching and the current session.
"""
import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import get_session
from app.core.clock import Clock, get_clock
from app.core.constants import USER_CUSTOMER, USER_TYPES
from app.core.session import SessionContext
from app.db.session import get_db
from app.services.auth import current_user, login, select_tenant, send_otp, verify_otp
from app.services.sms import SmsClient, get_sms_client

router = APIRouter()
logger = logging.getLogger(__name__)

UserType = Literal[USER_TYPES]


# --- Password login ---


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username, email, or business slug")
    password: str = Field(..., min_length=1)


@router.post("/login")
def login_endpoint(body: LoginRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    return login(db, body.username, body.password)


# --- Phone OTP ---


class OtpSendRequest(BaseModel):
    phone: str = Field(..., min_length=1)
    user_type: UserType = USER_CUSTOMER


class OtpVerifyRequest(BaseModel):
    phone: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=12)
    tenant_id: Optional[str] = Field(None, description="Bind the token to this business when the phone is registered there")
    user_type: Optional[UserType] = Field(None, description="Preferred role when no tenant_id is given")


class SelectTenantRequest(BaseModel):
    tenant_id: str = Field(..., min_length=1)


@router.post("/otp/send")
def otp_send(
    body: OtpSendRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    sms: SmsClient = Depends(get_sms_client),
) -> dict[str, Any]:
    return send_otp(db, body.phone, body.user_type, sms, clock)


@router.post("/otp/verify")
def otp_verify(
    body: OtpVerifyRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> dict[str, Any]:
    return verify_otp(db, body.phone, body.code, clock, tenant_id=body.tenant_id, user_type=body.user_type)


@router.post("/select-tenant")
def select_tenant_endpoint(
    body: SelectTenantRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session),
) -> dict[str, Any]:
    return select_tenant(db, ctx, body.tenant_id)


@router.get("/me")
def me(db: Session = Depends(get_db), ctx: SessionContext = Depends(get_session)) -> dict[str, Any]:
    return current_user(db, ctx)
