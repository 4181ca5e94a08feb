"""Staff member; belongs to exactly one tenant. working_hours, when set, overrides the tenant per weekday."""
import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, true
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Staff(Base):
    __tablename__ = "staff"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False, default="")
    phone = Column(String(32), nullable=True, index=True)
    email = Column(String(256), nullable=True)
    username = Column(String(128), nullable=True, unique=True)
    password_hash = Column(String(128), nullable=True)
    working_hours = Column(JSON, nullable=True)
    status = Column(String(16), nullable=False, default="active", server_default="active")  # active | inactive
    can_login = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    tenant = relationship("Tenant")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
