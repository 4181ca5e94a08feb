"""Username/password login for owners and staff, and the /auth/me user view."""
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.constants import USER_OWNER, USER_STAFF
from app.core.errors import NotFoundError, Unauthorized
from app.core.session import SessionContext
from app.models.customer import Customer
from app.models.staff import Staff
from app.models.tenant import Tenant
from app.services.auth.passwords import verify_password
from app.services.auth.tokens import issue_token

logger = logging.getLogger(__name__)

MSG_BAD_CREDENTIALS = "Invalid username or password"


def staff_user_view(staff: Staff) -> dict:
    return {
        "id": staff.id,
        "tenant_id": staff.tenant_id,
        "name": staff.full_name,
        "username": staff.username,
        "email": staff.email,
        "phone": staff.phone,
    }


def owner_user_view(tenant: Tenant) -> dict:
    return {
        "id": tenant.id,
        "tenant_id": tenant.id,
        "name": tenant.owner_name,
        "business_name": tenant.business_name,
        "slug": tenant.slug,
        "email": tenant.owner_email,
        "phone": tenant.phone,
    }


def customer_user_view(customer: Customer) -> dict:
    return {
        "id": customer.id,
        "tenant_id": customer.tenant_id,
        "name": customer.full_name,
        "phone": customer.phone,
        "email": customer.email,
    }


def login(db: Session, username: str, password: str) -> dict:
    """Staff accounts are tried first, then tenant owners."""
    username = (username or "").strip()
    staff = (
        db.query(Staff)
        .filter(
            or_(Staff.username == username, Staff.email == username),
            Staff.status == "active",
            Staff.can_login.is_(True),
        )
        .first()
    )
    if staff is not None and verify_password(password, staff.password_hash):
        ctx = SessionContext(
            user_type=USER_STAFF,
            tenant_id=staff.tenant_id,
            subject=staff.id,
            staff_id=staff.id,
            phone=staff.phone,
        )
        logger.info("Staff login staff=%s tenant=%s", staff.id, staff.tenant_id)
        return {"token": issue_token(ctx), "user_type": USER_STAFF, "user": staff_user_view(staff)}

    tenant = (
        db.query(Tenant)
        .filter(or_(Tenant.username == username, Tenant.owner_email == username, Tenant.slug == username))
        .first()
    )
    if tenant is not None and verify_password(password, tenant.password_hash):
        ctx = SessionContext(user_type=USER_OWNER, tenant_id=tenant.id, subject=tenant.id, phone=tenant.phone)
        logger.info("Owner login tenant=%s", tenant.id)
        return {"token": issue_token(ctx), "user_type": USER_OWNER, "user": owner_user_view(tenant)}

    logger.info("Failed login for %s", username)
    raise Unauthorized(MSG_BAD_CREDENTIALS)


def current_user(db: Session, ctx: SessionContext) -> dict:
    if ctx.is_staff:
        staff = db.get(Staff, ctx.staff_id)
        if staff is None:
            raise NotFoundError("Staff member not found")
        user = staff_user_view(staff)
    elif ctx.is_owner:
        tenant = db.get(Tenant, ctx.tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        user = owner_user_view(tenant)
    else:
        customer = db.get(Customer, ctx.customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        user = customer_user_view(customer)
    return {"user_type": ctx.user_type, "session": ctx.as_dict(), "user": user}
