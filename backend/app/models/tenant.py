"""Tenant (salon/business account): top-level multi-tenancy boundary and default weekly hours."""
import uuid

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.db.base import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_name = Column(String(256), nullable=False)
    slug = Column(String(128), nullable=False, unique=True, index=True)
    phone = Column(String(32), nullable=True, index=True)
    owner_name = Column(String(256), nullable=True)
    owner_email = Column(String(256), nullable=True, index=True)
    username = Column(String(128), nullable=True, unique=True)
    password_hash = Column(String(128), nullable=True)
    # {"monday": {"start": "09:00", "end": "18:00", "closed": false}, ...}
    working_hours = Column(JSON, nullable=True)
    appointment_interval_minutes = Column(Integer, nullable=False, default=30, server_default="30")
    utc_offset_minutes = Column(Integer, nullable=True)  # null = settings.default_utc_offset_minutes
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
