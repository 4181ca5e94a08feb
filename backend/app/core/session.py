"""
Explicit per-request identity. Built from the bearer token by app.api.deps and passed
to services so authorization never depends on ambient state.
"""
from __future__ import annotations

from dataclasses import dataclass

from app.core.constants import USER_CUSTOMER, USER_OWNER, USER_STAFF


@dataclass(frozen=True)
class SessionContext:
    user_type: str
    tenant_id: str | None
    subject: str  # tenant id for owners, staff id, or customer id
    staff_id: str | None = None
    customer_id: str | None = None
    phone: str | None = None

    @property
    def is_owner(self) -> bool:
        return self.user_type == USER_OWNER

    @property
    def is_staff(self) -> bool:
        return self.user_type == USER_STAFF

    @property
    def is_customer(self) -> bool:
        return self.user_type == USER_CUSTOMER

    def as_dict(self) -> dict:
        return {
            "user_type": self.user_type,
            "tenant_id": self.tenant_id,
            "sub": self.subject,
            "staff_id": self.staff_id,
            "customer_id": self.customer_id,
            "phone": self.phone,
        }
