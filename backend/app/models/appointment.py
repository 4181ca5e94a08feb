"""
Appointment row. date is YYYY-MM-DD and time is HH:MM in tenant-local time.

At most one non-cancelled appointment per (tenant, staff, date, time): enforced by a partial
unique index so concurrent bookings collide at the database instead of double-booking.
"""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base

ACTIVE_SLOT_INDEX = "uq_appointments_active_slot"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            ACTIVE_SLOT_INDEX,
            "tenant_id",
            "staff_id",
            "date",
            "time",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
        Index("ix_appointments_tenant_staff_date", "tenant_id", "staff_id", "date"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    staff_id = Column(String(36), ForeignKey("staff.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id", ondelete="CASCADE"), nullable=False)
    date = Column(String(10), nullable=False)
    time = Column(String(5), nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    duration = Column(Integer, nullable=False, default=30)  # snapshot of service duration
    price = Column(Numeric(10, 2), nullable=False, default=0)  # snapshot of service price
    notes = Column(Text, nullable=True)
    reminder_sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    staff = relationship("Staff")
    customer = relationship("Customer")
    service = relationship("Service")
    tenant = relationship("Tenant")
