"""Tenant scoping helper shared by the CRUD services."""
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError


def get_owned(db: Session, model, row_id: str | None, tenant_id: str | None, label: str):
    """Load a tenant-owned row. A row that belongs to another tenant is reported as missing."""
    row = db.get(model, row_id) if row_id else None
    if row is None or row.tenant_id != tenant_id:
        raise NotFoundError(f"{label} not found")
    return row
