"""
Tenants: bootstrap, public profile and owner settings (working hours, slot interval, UTC offset).
"""
import copy
import logging
import re

from sqlalchemy.orm import Session

from app.config import settings
from app.core.constants import DEFAULT_WORKING_HOURS
from app.core.errors import ConflictError, NotFoundError, ValidationFailed
from app.models.tenant import Tenant
from app.services.auth.passwords import hash_password
from app.services.sms import normalize_phone

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = ("business_name", "phone", "owner_name", "owner_email", "working_hours", "appointment_interval_minutes", "utc_offset_minutes")


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").strip().lower()).strip("-")
    return slug[:128]


def tenant_public_view(tenant: Tenant) -> dict:
    return {
        "id": tenant.id,
        "business_name": tenant.business_name,
        "slug": tenant.slug,
        "phone": tenant.phone,
        "working_hours": tenant.working_hours or copy.deepcopy(DEFAULT_WORKING_HOURS),
        "appointment_interval_minutes": tenant.appointment_interval_minutes,
    }


def tenant_settings_view(tenant: Tenant) -> dict:
    out = tenant_public_view(tenant)
    out.update(
        {
            "owner_name": tenant.owner_name,
            "owner_email": tenant.owner_email,
            "username": tenant.username,
            "utc_offset_minutes": tenant.utc_offset_minutes,
            "effective_utc_offset_minutes": (
                tenant.utc_offset_minutes
                if tenant.utc_offset_minutes is not None
                else settings.default_utc_offset_minutes
            ),
        }
    )
    return out


def create_tenant(
    db: Session,
    *,
    business_name: str,
    slug: str | None = None,
    phone: str | None = None,
    owner_name: str | None = None,
    owner_email: str | None = None,
    username: str | None = None,
    password: str | None = None,
    working_hours: dict | None = None,
    appointment_interval_minutes: int | None = None,
    utc_offset_minutes: int | None = None,
) -> Tenant:
    """New tenants start with the default weekly template unless hours are given."""
    slug = slugify(slug or business_name)
    if not slug:
        raise ValidationFailed("slug could not be derived from business_name")
    if db.query(Tenant.id).filter(Tenant.slug == slug).first():
        raise ConflictError(f"Slug '{slug}' is already taken")
    if username and db.query(Tenant.id).filter(Tenant.username == username).first():
        raise ConflictError(f"Username '{username}' is already taken")
    tenant = Tenant(
        business_name=business_name.strip(),
        slug=slug,
        phone=normalize_phone(phone) if phone else None,
        owner_name=owner_name,
        owner_email=owner_email,
        username=username,
        password_hash=hash_password(password) if password else None,
        working_hours=working_hours or copy.deepcopy(DEFAULT_WORKING_HOURS),
        appointment_interval_minutes=appointment_interval_minutes or settings.default_slot_interval_minutes,
        utc_offset_minutes=utc_offset_minutes,
    )
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    logger.info("Created tenant %s slug=%s", tenant.id, tenant.slug)
    return tenant


def get_tenant(db: Session, tenant_id: str | None) -> Tenant:
    tenant = db.get(Tenant, tenant_id) if tenant_id else None
    if tenant is None:
        raise NotFoundError("Tenant not found")
    return tenant


def get_tenant_by_slug(db: Session, slug: str) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.slug == slug).first()
    if tenant is None:
        raise NotFoundError("Tenant not found")
    return tenant


def update_settings(db: Session, tenant_id: str, changes: dict) -> Tenant:
    """Apply only the keys present in changes. utc_offset_minutes=None reverts to the server default."""
    tenant = get_tenant(db, tenant_id)
    for key, value in changes.items():
        if key not in SETTINGS_FIELDS:
            continue
        if key == "phone" and value:
            value = normalize_phone(value)
        if key == "business_name" and not (value or "").strip():
            raise ValidationFailed("business_name cannot be empty")
        if key == "appointment_interval_minutes" and value is None:
            raise ValidationFailed("appointment_interval_minutes cannot be empty")
        setattr(tenant, key, value)
    db.commit()
    db.refresh(tenant)
    logger.info("Updated settings for tenant %s: %s", tenant.id, sorted(changes))
    return tenant
