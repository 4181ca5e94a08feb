"""Bookable services (name, duration, price) of a tenant."""
import logging

from sqlalchemy.orm import Session

from app.models.service import Service
from app.services.tenant_scope import get_owned

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "duration", "price", "is_active")


def service_to_dict(s: Service) -> dict:
    return {
        "id": s.id,
        "tenant_id": s.tenant_id,
        "name": s.name,
        "duration": s.duration,
        "price": float(s.price) if s.price is not None else None,
        "is_active": s.is_active,
    }


def list_services(db: Session, tenant_id: str, active_only: bool = True) -> list[Service]:
    q = db.query(Service).filter(Service.tenant_id == tenant_id)
    if active_only:
        q = q.filter(Service.is_active.is_(True))
    return q.order_by(Service.name.asc()).all()


def create_service(db: Session, tenant_id: str, data: dict) -> Service:
    service = Service(tenant_id=tenant_id, **{k: v for k, v in data.items() if k in EDITABLE_FIELDS})
    db.add(service)
    db.commit()
    db.refresh(service)
    logger.info("Created service %s for tenant %s", service.id, tenant_id)
    return service


def update_service(db: Session, tenant_id: str, service_id: str, changes: dict) -> Service:
    service = get_owned(db, Service, service_id, tenant_id, "Service")
    for key, value in changes.items():
        if key in EDITABLE_FIELDS and value is not None:
            setattr(service, key, value)
    db.commit()
    db.refresh(service)
    return service


def delete_service(db: Session, tenant_id: str, service_id: str) -> None:
    service = get_owned(db, Service, service_id, tenant_id, "Service")
    db.delete(service)
    db.commit()
