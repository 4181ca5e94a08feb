"""
Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database (StaticPool keeps one connection so the
schema survives across sessions), a FrozenClock pinned to Tuesday 2026-03-10 10:00 local
time (07:00 UTC at the default UTC+3) and a fake SMS client that records messages.
"""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.clock import FrozenClock, get_clock
from app.core.constants import USER_CUSTOMER, USER_OWNER, USER_STAFF
from app.core.session import SessionContext
from app.db.base import Base
from app.db.session import get_db
from app.main import app as fastapi_app
from app.services.auth.tokens import issue_token
from app.services.catalog_service import create_service
from app.services.customer_service import create_customer
from app.services.sms import get_sms_client
from app.services.staff_service import create_staff
from app.services.tenant_service import create_tenant

# Tuesday, 10:00 in UTC+3
NOW_UTC = datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc)
TODAY = "2026-03-10"
TOMORROW = "2026-03-11"
SUNDAY = "2026-03-15"

OWNER_PASSWORD = "owner-pass"
STAFF_PASSWORD = "staff-pass"


class FakeSms:
    """Stands in for SmsClient; set fail=True to simulate a provider rejection."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def is_configured(self) -> bool:
        return True

    def send(self, phone: str, message: str, **kwargs) -> dict:
        if self.fail:
            return {"error": "Invalid credentials or no API access", "code": "30"}
        self.sent.append((phone, message))
        return {"ok": True, "code": "00", "bulk_id": str(len(self.sent))}


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock(NOW_UTC)


@pytest.fixture
def fake_sms():
    return FakeSms()


@pytest.fixture
def client(session_factory, clock, fake_sms):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = _get_db
    fastapi_app.dependency_overrides[get_clock] = lambda: clock
    fastapi_app.dependency_overrides[get_sms_client] = lambda: fake_sms
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


# --- Data ---


@pytest.fixture
def tenant(db):
    return create_tenant(
        db,
        business_name="Test Salon",
        slug="test-salon",
        phone="0532 111 22 33",
        owner_name="Owner",
        owner_email="owner@test-salon.test",
        username="owner",
        password=OWNER_PASSWORD,
    )


@pytest.fixture
def staff(db, tenant):
    return create_staff(
        db,
        tenant.id,
        {"first_name": "Ayse", "last_name": "Yilmaz", "username": "ayse", "password": STAFF_PASSWORD, "phone": "05324445566"},
    )


@pytest.fixture
def other_staff(db, tenant):
    return create_staff(db, tenant.id, {"first_name": "Mehmet", "last_name": "Kaya"})


@pytest.fixture
def service(db, tenant):
    return create_service(db, tenant.id, {"name": "Haircut", "duration": 45, "price": 250})


@pytest.fixture
def customer(db, tenant):
    return create_customer(db, tenant.id, {"first_name": "Zeynep", "last_name": "Demir", "phone": "0555 111 22 33"})


@pytest.fixture
def other_customer(db, tenant):
    return create_customer(db, tenant.id, {"first_name": "Can", "last_name": "Ozturk", "phone": "05557778899"})


# --- Auth headers ---


def bearer(ctx: SessionContext) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(ctx)}"}


@pytest.fixture
def owner_headers(tenant):
    return bearer(SessionContext(user_type=USER_OWNER, tenant_id=tenant.id, subject=tenant.id))


@pytest.fixture
def staff_headers(staff):
    ctx = SessionContext(user_type=USER_STAFF, tenant_id=staff.tenant_id, subject=staff.id, staff_id=staff.id)
    return bearer(ctx)


@pytest.fixture
def customer_headers(customer):
    ctx = SessionContext(
        user_type=USER_CUSTOMER,
        tenant_id=customer.tenant_id,
        subject=customer.id,
        customer_id=customer.id,
        phone=customer.phone,
    )
    return bearer(ctx)


@pytest.fixture
def other_customer_headers(other_customer):
    ctx = SessionContext(
        user_type=USER_CUSTOMER,
        tenant_id=other_customer.tenant_id,
        subject=other_customer.id,
        customer_id=other_customer.id,
        phone=other_customer.phone,
    )
    return bearer(ctx)
