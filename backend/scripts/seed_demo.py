#!/usr/bin/env python3
"""
Create a demo salon: owner login, two staff, three services and the demo OTP customer.
Safe to re-run; does nothing when the demo slug already exists.

Run from backend dir:
  python scripts/seed_demo.py
"""
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from app.config import settings
from app.db.session import SessionLocal
from app.models.tenant import Tenant
from app.services.catalog_service import create_service
from app.services.customer_service import create_customer
from app.services.staff_service import create_staff
from app.services.tenant_service import create_tenant

DEMO_SLUG = "demo-salon"


def main():
    db = SessionLocal()
    try:
        if db.query(Tenant.id).filter(Tenant.slug == DEMO_SLUG).first():
            print(f"Tenant '{DEMO_SLUG}' already exists; nothing to do.")
            return
        tenant = create_tenant(
            db,
            business_name="Demo Salon",
            slug=DEMO_SLUG,
            owner_name="Demo Owner",
            owner_email="owner@demo-salon.test",
            username="demo-owner",
            password="demo1234",
        )
        create_staff(db, tenant.id, {"first_name": "Ayse", "last_name": "Yilmaz", "username": "ayse", "password": "demo1234"})
        create_staff(
            db,
            tenant.id,
            {
                "first_name": "Mehmet",
                "last_name": "Kaya",
                "username": "mehmet",
                "password": "demo1234",
                # Works mornings only on Saturday, off on Monday
                "working_hours": {
                    "monday": {"closed": True},
                    "saturday": {"start": "09:00", "end": "13:00", "closed": False},
                },
            },
        )
        for name, duration, price in (("Haircut", 30, 250), ("Beard trim", 15, 100), ("Hair colouring", 90, 900)):
            create_service(db, tenant.id, {"name": name, "duration": duration, "price": price})
        create_customer(db, tenant.id, {"first_name": "Demo", "last_name": "Customer", "phone": settings.otp_demo_phone})
        print(f"Created tenant {tenant.id} ({DEMO_SLUG}). Owner login: demo-owner / demo1234")
    finally:
        db.close()


if __name__ == "__main__":
    main()
