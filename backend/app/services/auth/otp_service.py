"""
Phone OTP login for the mobile app.

send_otp stores one pending code per phone (older codes are replaced) and texts it.
verify_otp consumes the code and issues a token for the role the phone holds (owner, staff or
customer) in one tenant; select_tenant switches that tenant without another code.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session

from app.config import settings
from app.core.clock import Clock
from app.core.constants import OTP_LENGTH, OTP_PURPOSE_MOBILE_LOGIN, USER_CUSTOMER, USER_OWNER, USER_STAFF
from app.core.errors import Forbidden, NotFoundError, SmsDeliveryError, ValidationFailed
from app.core.session import SessionContext
from app.models.customer import Customer
from app.models.otp_verification import OtpVerification
from app.models.staff import Staff
from app.models.tenant import Tenant
from app.services.auth.login_service import customer_user_view, owner_user_view, staff_user_view
from app.services.auth.tokens import issue_token
from app.services.sms import SmsClient, normalize_phone, send_sms

logger = logging.getLogger(__name__)

OTP_MESSAGE = "Your verification code: {code}. It is valid for {minutes} minutes."


def generate_code() -> str:
    return f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"


def _phone_is_known(db: Session, phone: str) -> bool:
    if db.query(Customer.id).filter(Customer.phone == phone).first():
        return True
    if db.query(Staff.id).filter(Staff.phone == phone).first():
        return True
    return db.query(Tenant.id).filter(Tenant.phone == phone).first() is not None


def send_otp(db: Session, phone: str, user_type: str, sms: SmsClient, clock: Clock) -> dict:
    normalized = normalize_phone(phone)
    if not normalized:
        raise ValidationFailed("Phone number is required")
    if user_type != USER_CUSTOMER and not _phone_is_known(db, normalized):
        raise NotFoundError("No account found for this phone number")

    is_demo = normalized == settings.otp_demo_phone
    code = settings.otp_demo_code if is_demo else generate_code()
    db.query(OtpVerification).filter(OtpVerification.phone == normalized).delete(synchronize_session=False)
    db.add(
        OtpVerification(
            phone=normalized,
            code=code,
            purpose=OTP_PURPOSE_MOBILE_LOGIN,
            expires_at=clock.now() + timedelta(minutes=settings.otp_ttl_minutes),
        )
    )
    db.commit()

    if is_demo:
        logger.info("OTP for demo phone %s stored; SMS skipped", normalized)
    else:
        try:
            send_sms(sms, normalized, OTP_MESSAGE.format(code=code, minutes=settings.otp_ttl_minutes))
        except SmsDeliveryError:
            if not settings.is_development:
                raise
            logger.warning("OTP SMS to %s failed in development; code kept for manual testing", normalized)
    return {"sent": True, "phone": normalized, "expires_in": settings.otp_ttl_minutes * 60}


def _valid_code_row(db: Session, phone: str, code: str, clock: Clock) -> OtpVerification | None:
    # expires_at compared in SQL: SQLite hands back naive datetimes
    return (
        db.query(OtpVerification)
        .filter(
            OtpVerification.phone == phone,
            OtpVerification.code == code,
            OtpVerification.purpose == OTP_PURPOSE_MOBILE_LOGIN,
            OtpVerification.expires_at > clock.now(),
        )
        .first()
    )




@dataclass
class Membership:
    """The role a phone number holds in one tenant."""

    user_type: str
    tenant: Tenant
    row: Customer | Staff | Tenant

    def session(self, phone: str) -> SessionContext:
        if self.user_type == USER_OWNER:
            return SessionContext(user_type=USER_OWNER, tenant_id=self.tenant.id, subject=self.tenant.id, phone=phone)
        if self.user_type == USER_STAFF:
            return SessionContext(
                user_type=USER_STAFF, tenant_id=self.tenant.id, subject=self.row.id, staff_id=self.row.id, phone=phone
            )
        return SessionContext(
            user_type=USER_CUSTOMER, tenant_id=self.tenant.id, subject=self.row.id, customer_id=self.row.id, phone=phone
        )

    def user_view(self) -> dict:
        if self.user_type == USER_OWNER:
            return owner_user_view(self.tenant)
        if self.user_type == USER_STAFF:
            return staff_user_view(self.row)
        return customer_user_view(self.row)


def phone_memberships(db: Session, phone: str) -> dict[str, Membership]:
    """
    Tenant id -> Membership for every business that knows this phone. Within one tenant the
    owner wins over staff, and staff win over a customer row.
    """
    found: dict[str, Membership] = {}
    customers = db.query(Customer).filter(Customer.phone == phone).order_by(Customer.created_at.asc()).all()
    for c in customers:
        if c.tenant is not None and c.tenant_id not in found:
            found[c.tenant_id] = Membership(USER_CUSTOMER, c.tenant, c)
    staff_rows = (
        db.query(Staff)
        .filter(Staff.phone == phone, Staff.status == "active", Staff.can_login.is_(True))
        .order_by(Staff.created_at.asc())
        .all()
    )
    for s in staff_rows:
        current = found.get(s.tenant_id)
        if s.tenant is not None and (current is None or current.user_type == USER_CUSTOMER):
            found[s.tenant_id] = Membership(USER_STAFF, s.tenant, s)
    for t in db.query(Tenant).filter(Tenant.phone == phone).order_by(Tenant.created_at.asc()).all():
        found[t.id] = Membership(USER_OWNER, t, t)
    return found


def _pick(memberships: dict[str, Membership], tenant_id: str | None, user_type: str | None) -> Membership:
    if tenant_id and tenant_id in memberships:
        return memberships[tenant_id]
    if user_type:
        for m in memberships.values():
            if m.user_type == user_type:
                return m
    return next(iter(memberships.values()))


def _login_payload(memberships: dict[str, Membership], chosen: Membership, phone: str) -> dict:
    body = {
        "token": issue_token(chosen.session(phone)),
        "user_type": chosen.user_type,
        "user": chosen.user_view(),
        "tenants": [
            {"id": m.tenant.id, "business_name": m.tenant.business_name, "slug": m.tenant.slug, "user_type": m.user_type}
            for m in memberships.values()
        ],
    }
    if chosen.user_type == USER_CUSTOMER:
        body["customer"] = {
            "id": chosen.row.id,
            "tenant_id": chosen.row.tenant_id,
            "name": chosen.row.full_name,
            "phone": chosen.row.phone,
        }
    return body


def verify_otp(
    db: Session,
    phone: str,
    code: str,
    clock: Clock,
    tenant_id: str | None = None,
    user_type: str | None = None,
) -> dict:
    """
    Consume the code and log in as whoever the phone is. tenant_id picks the business when the
    phone is known to several; otherwise user_type is preferred, then the first match.
    """
    normalized = normalize_phone(phone)
    code = (code or "").strip()
    row = _valid_code_row(db, normalized, code, clock)
    is_demo = normalized == settings.otp_demo_phone and code == settings.otp_demo_code
    if row is None and not is_demo:
        raise ValidationFailed("Invalid or expired verification code")

    memberships = phone_memberships(db, normalized)
    if not memberships:
        raise NotFoundError("No account found for this phone number")

    if row is not None:
        db.delete(row)
        db.commit()

    chosen = _pick(memberships, tenant_id, user_type)
    logger.info("OTP login %s=%s tenant=%s", chosen.user_type, chosen.row.id, chosen.tenant.id)
    return _login_payload(memberships, chosen, normalized)


def select_tenant(db: Session, ctx: SessionContext, tenant_id: str) -> dict:
    """Re-issue the token for another business this phone belongs to, without a new OTP."""
    if not ctx.phone:
        raise Forbidden("This session is not tied to a phone number")
    memberships = phone_memberships(db, ctx.phone)
    chosen = memberships.get(tenant_id)
    if chosen is None:
        raise Forbidden("This phone number is not registered with that business")
    logger.info("Tenant switch %s=%s tenant=%s", chosen.user_type, chosen.row.id, tenant_id)
    return _login_payload(memberships, chosen, ctx.phone)
