"""Staff members of a tenant. working_hours on a staff row overrides the tenant per weekday."""
import logging

from sqlalchemy.orm import Session

from app.core.errors import ConflictError
from app.models.staff import Staff
from app.services.auth.passwords import hash_password
from app.services.sms import normalize_phone
from app.services.tenant_scope import get_owned

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("first_name", "last_name", "phone", "email", "username", "working_hours", "status", "can_login")


def staff_to_dict(s: Staff) -> dict:
    return {
        "id": s.id,
        "tenant_id": s.tenant_id,
        "first_name": s.first_name,
        "last_name": s.last_name,
        "name": s.full_name,
        "phone": s.phone,
        "email": s.email,
        "username": s.username,
        "working_hours": s.working_hours,
        "status": s.status,
        "can_login": s.can_login,
        "created_at": s.created_at.isoformat() if s.created_at else None,
    }


def staff_public_view(s: Staff) -> dict:
    """What customers see when picking a staff member: no login or contact fields."""
    return {
        "id": s.id,
        "first_name": s.first_name,
        "last_name": s.last_name,
        "name": s.full_name,
        "working_hours": s.working_hours,
    }


def _check_username(db: Session, username: str | None, exclude_id: str | None = None) -> None:
    if not username:
        return
    q = db.query(Staff.id).filter(Staff.username == username)
    if exclude_id:
        q = q.filter(Staff.id != exclude_id)
    if q.first():
        raise ConflictError(f"Username '{username}' is already taken")


def list_staff(db: Session, tenant_id: str, include_inactive: bool = False) -> list[Staff]:
    q = db.query(Staff).filter(Staff.tenant_id == tenant_id)
    if not include_inactive:
        q = q.filter(Staff.status == "active")
    return q.order_by(Staff.first_name.asc(), Staff.last_name.asc()).all()


def get_staff(db: Session, tenant_id: str, staff_id: str) -> Staff:
    return get_owned(db, Staff, staff_id, tenant_id, "Staff member")


def create_staff(db: Session, tenant_id: str, data: dict) -> Staff:
    _check_username(db, data.get("username"))
    password = data.pop("password", None)
    fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
    if fields.get("phone"):
        fields["phone"] = normalize_phone(fields["phone"])
    staff = Staff(tenant_id=tenant_id, password_hash=hash_password(password) if password else None, **fields)
    db.add(staff)
    db.commit()
    db.refresh(staff)
    logger.info("Created staff %s for tenant %s", staff.id, tenant_id)
    return staff


def update_staff(db: Session, tenant_id: str, staff_id: str, changes: dict) -> Staff:
    """Only keys present in changes are applied; working_hours=None clears the override."""
    staff = get_staff(db, tenant_id, staff_id)
    if "username" in changes:
        _check_username(db, changes["username"], exclude_id=staff.id)
    for key, value in changes.items():
        if key == "password":
            if value:
                staff.password_hash = hash_password(value)
            continue
        if key not in EDITABLE_FIELDS:
            continue
        if key == "phone" and value:
            value = normalize_phone(value)
        setattr(staff, key, value)
    db.commit()
    db.refresh(staff)
    return staff


def delete_staff(db: Session, tenant_id: str, staff_id: str) -> None:
    """Deletes the staff row; their appointments go with it (FK cascade)."""
    staff = get_staff(db, tenant_id, staff_id)
    db.delete(staff)
    db.commit()
    logger.info("Deleted staff %s from tenant %s", staff_id, tenant_id)
