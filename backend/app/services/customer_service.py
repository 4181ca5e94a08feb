"""Customers of a tenant. Phone numbers are stored normalized and unique per tenant."""
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import CUSTOMERS_LIST_LIMIT
from app.core.errors import ConflictError, ValidationFailed
from app.models.customer import Customer
from app.services.sms import normalize_phone
from app.services.tenant_scope import get_owned

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("first_name", "last_name", "phone", "email")
MSG_DUPLICATE_PHONE = "A customer with this phone number already exists"


def customer_to_dict(c: Customer) -> dict:
    return {
        "id": c.id,
        "tenant_id": c.tenant_id,
        "first_name": c.first_name,
        "last_name": c.last_name,
        "name": c.full_name,
        "phone": c.phone,
        "email": c.email,
        "created_at": c.created_at.isoformat() if c.created_at else None,
    }


def list_customers(db: Session, tenant_id: str, search: str | None = None) -> list[Customer]:
    q = db.query(Customer).filter(Customer.tenant_id == tenant_id)
    term = (search or "").strip()
    if term:
        like = f"%{term}%"
        q = q.filter(
            or_(
                Customer.first_name.ilike(like),
                Customer.last_name.ilike(like),
                Customer.phone.ilike(like),
            )
        )
    return q.order_by(Customer.first_name.asc(), Customer.last_name.asc()).limit(CUSTOMERS_LIST_LIMIT).all()


def get_customer(db: Session, tenant_id: str, customer_id: str) -> Customer:
    return get_owned(db, Customer, customer_id, tenant_id, "Customer")


def _commit_or_duplicate(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(MSG_DUPLICATE_PHONE)


def create_customer(db: Session, tenant_id: str, data: dict) -> Customer:
    phone = normalize_phone(data.get("phone") or "")
    if not phone:
        raise ValidationFailed("phone is required")
    if db.query(Customer.id).filter(Customer.tenant_id == tenant_id, Customer.phone == phone).first():
        raise ConflictError(MSG_DUPLICATE_PHONE)
    fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
    fields["phone"] = phone
    customer = Customer(tenant_id=tenant_id, **fields)
    db.add(customer)
    _commit_or_duplicate(db)
    db.refresh(customer)
    logger.info("Created customer %s for tenant %s", customer.id, tenant_id)
    return customer


def update_customer(db: Session, tenant_id: str, customer_id: str, changes: dict) -> Customer:
    customer = get_customer(db, tenant_id, customer_id)
    for key, value in changes.items():
        if key not in EDITABLE_FIELDS:
            continue
        if key == "phone":
            value = normalize_phone(value or "")
            if not value:
                raise ValidationFailed("phone cannot be empty")
        setattr(customer, key, value)
    _commit_or_duplicate(db)
    db.refresh(customer)
    return customer


def delete_customer(db: Session, tenant_id: str, customer_id: str) -> None:
    customer = get_customer(db, tenant_id, customer_id)
    db.delete(customer)
    db.commit()
    logger.info("Deleted customer %s from tenant %s", customer_id, tenant_id)
