"""
Tests for /auth: password login, phone OTP login and /auth/me.
"""
from conftest import OWNER_PASSWORD, STAFF_PASSWORD

from app.config import settings
from app.models.otp_verification import OtpVerification
from app.services.customer_service import create_customer
from app.services.tenant_service import create_tenant

CUSTOMER_PHONE = "905551112233"


def stored_code(db, phone=CUSTOMER_PHONE):
    db.expire_all()
    row = db.query(OtpVerification).filter(OtpVerification.phone == phone).one()
    return row.code


class TestPasswordLogin:
    def test_owner_login_by_username_email_or_slug(self, client, tenant):
        for username in ("owner", "owner@test-salon.test", "test-salon"):
            r = client.post("/auth/login", json={"username": username, "password": OWNER_PASSWORD})
            assert r.status_code == 200, username
            body = r.json()
            assert body["user_type"] == "owner"
            assert body["user"]["tenant_id"] == tenant.id
            assert body["token"]

    def test_staff_login(self, client, staff):
        r = client.post("/auth/login", json={"username": "ayse", "password": STAFF_PASSWORD})
        assert r.status_code == 200
        assert r.json()["user_type"] == "staff"
        assert r.json()["user"]["id"] == staff.id

    def test_wrong_password(self, client, tenant):
        r = client.post("/auth/login", json={"username": "owner", "password": "nope"})
        assert r.status_code == 401
        assert r.json() == {"detail": "Invalid username or password", "code": "unauthorized"}

    def test_inactive_staff_cannot_log_in(self, client, owner_headers, staff):
        client.patch(f"/staff/{staff.id}", json={"status": "inactive"}, headers=owner_headers)
        r = client.post("/auth/login", json={"username": "ayse", "password": STAFF_PASSWORD})
        assert r.status_code == 401

    def test_token_works_for_me(self, client, staff):
        token = client.post("/auth/login", json={"username": "ayse", "password": STAFF_PASSWORD}).json()["token"]
        r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200
        body = r.json()
        assert body["user_type"] == "staff"
        assert body["session"]["staff_id"] == staff.id
        assert body["user"]["name"] == "Ayse Yilmaz"


class TestMe:
    def test_missing_token(self, client):
        r = client.get("/auth/me")
        assert r.status_code == 401

    def test_garbage_token(self, client):
        r = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401
        assert r.json()["code"] == "unauthorized"

    def test_customer_view(self, client, customer_headers, customer):
        body = client.get("/auth/me", headers=customer_headers).json()
        assert body["user_type"] == "customer"
        assert body["user"]["phone"] == customer.phone


class TestOtp:
    def test_send_and_verify(self, client, db, fake_sms, customer, tenant):
        r = client.post("/auth/otp/send", json={"phone": "0555 111 22 33"})
        assert r.status_code == 200
        assert r.json()["phone"] == CUSTOMER_PHONE
        assert len(fake_sms.sent) == 1
        phone, message = fake_sms.sent[0]
        code = stored_code(db)
        assert phone == CUSTOMER_PHONE
        assert code in message
        assert len(code) == 6

        r = client.post("/auth/otp/verify", json={"phone": "05551112233", "code": code})
        assert r.status_code == 200
        body = r.json()
        assert body["user_type"] == "customer"
        assert body["customer"]["id"] == customer.id
        assert body["tenants"] == [
            {"id": tenant.id, "business_name": "Test Salon", "slug": "test-salon", "user_type": "customer"}
        ]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"}).json()
        assert me["session"]["customer_id"] == customer.id

    def test_code_is_single_use(self, client, db, customer):
        client.post("/auth/otp/send", json={"phone": CUSTOMER_PHONE})
        code = stored_code(db)
        assert client.post("/auth/otp/verify", json={"phone": CUSTOMER_PHONE, "code": code}).status_code == 200
        r = client.post("/auth/otp/verify", json={"phone": CUSTOMER_PHONE, "code": code})
        assert r.status_code == 400

    def test_resend_replaces_previous_code(self, client, db, customer):
        client.post("/auth/otp/send", json={"phone": CUSTOMER_PHONE})
        client.post("/auth/otp/send", json={"phone": CUSTOMER_PHONE})
        db.expire_all()
        assert db.query(OtpVerification).filter(OtpVerification.phone == CUSTOMER_PHONE).count() == 1

    def test_wrong_code(self, client, customer):
        client.post("/auth/otp/send", json={"phone": CUSTOMER_PHONE})
        r = client.post("/auth/otp/verify", json={"phone": CUSTOMER_PHONE, "code": "000000x"})
        assert r.status_code == 400
        assert r.json()["code"] == "validation_failed"

    def test_expired_code(self, client, db, clock, customer):
        client.post("/auth/otp/send", json={"phone": CUSTOMER_PHONE})
        code = stored_code(db)
        clock.advance(minutes=settings.otp_ttl_minutes + 1)
        r = client.post("/auth/otp/verify", json={"phone": CUSTOMER_PHONE, "code": code})
        assert r.status_code == 400

    def test_unknown_phone_on_verify_is_404(self, client, db):
        client.post("/auth/otp/send", json={"phone": "05559998877"})
        code = stored_code(db, "905559998877")
        r = client.post("/auth/otp/verify", json={"phone": "05559998877", "code": code})
        assert r.status_code == 404

    def test_staff_login_requires_known_phone(self, client):
        r = client.post("/auth/otp/send", json={"phone": "05559998877", "user_type": "staff"})
        assert r.status_code == 404

    def test_staff_phone_is_known(self, client, staff, fake_sms):
        r = client.post("/auth/otp/send", json={"phone": "05324445566", "user_type": "staff"})
        assert r.status_code == 200
        assert len(fake_sms.sent) == 1

    def test_demo_phone_skips_sms(self, client, db, fake_sms, tenant):
        create_customer(db, tenant.id, {"first_name": "Demo", "phone": settings.otp_demo_phone})
        assert client.post("/auth/otp/send", json={"phone": settings.otp_demo_phone}).status_code == 200
        assert fake_sms.sent == []
        r = client.post("/auth/otp/verify", json={"phone": settings.otp_demo_phone, "code": settings.otp_demo_code})
        assert r.status_code == 200

    def test_sms_failure_tolerated_in_development(self, client, fake_sms, customer):
        fake_sms.fail = True
        r = client.post("/auth/otp/send", json={"phone": CUSTOMER_PHONE})
        assert r.status_code == 200

    def test_sms_failure_is_502_outside_development(self, client, fake_sms, customer, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")
        fake_sms.fail = True
        r = client.post("/auth/otp/send", json={"phone": CUSTOMER_PHONE})
        assert r.status_code == 502
        assert r.json()["code"] == "sms_failed"

    def test_token_bound_to_requested_tenant(self, client, db, tenant, customer):
        other = create_tenant(db, business_name="Second Salon")
        second = create_customer(db, other.id, {"first_name": "Zeynep", "phone": CUSTOMER_PHONE})
        client.post("/auth/otp/send", json={"phone": CUSTOMER_PHONE})
        code = stored_code(db)
        body = client.post(
            "/auth/otp/verify", json={"phone": CUSTOMER_PHONE, "code": code, "tenant_id": other.id}
        ).json()
        assert body["customer"]["id"] == second.id
        assert {t["id"] for t in body["tenants"]} == {tenant.id, other.id}


STAFF_PHONE = "905324445566"
OWNER_PHONE = "905321112233"


def otp_login(client, db, phone, **extra):
    client.post("/auth/otp/send", json={"phone": phone, "user_type": extra.get("user_type", "customer")})
    code = stored_code(db, phone)
    return client.post("/auth/otp/verify", json={"phone": phone, "code": code, **extra})


class TestOtpRoles:
    def test_staff_phone_logs_in_as_staff(self, client, db, staff):
        r = otp_login(client, db, STAFF_PHONE, user_type="staff")
        assert r.status_code == 200
        body = r.json()
        assert body["user_type"] == "staff"
        assert body["user"]["id"] == staff.id
        assert "customer" not in body
        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"}).json()
        assert me["session"]["staff_id"] == staff.id
        assert me["session"]["phone"] == STAFF_PHONE

    def test_owner_phone_logs_in_as_owner(self, client, db, tenant):
        r = otp_login(client, db, OWNER_PHONE, user_type="owner")
        assert r.status_code == 200
        body = r.json()
        assert body["user_type"] == "owner"
        assert body["user"]["tenant_id"] == tenant.id
        assert body["tenants"][0]["user_type"] == "owner"
        settings_r = client.get("/settings", headers={"Authorization": f"Bearer {body['token']}"})
        assert settings_r.status_code == 200

    def test_staff_role_wins_over_customer_row_in_same_tenant(self, client, db, tenant, staff):
        create_customer(db, tenant.id, {"first_name": "Ayse", "phone": STAFF_PHONE})
        body = otp_login(client, db, STAFF_PHONE).json()
        assert body["user_type"] == "staff"
        assert [t["user_type"] for t in body["tenants"]] == ["staff"]

    def test_preferred_role_picks_the_matching_tenant(self, client, db, tenant, staff):
        other = create_tenant(db, business_name="Second Salon")
        mine = create_customer(db, other.id, {"first_name": "Ayse", "phone": STAFF_PHONE})
        body = otp_login(client, db, STAFF_PHONE, user_type="customer").json()
        assert body["user_type"] == "customer"
        assert body["customer"]["id"] == mine.id
        body = otp_login(client, db, STAFF_PHONE, user_type="staff").json()
        assert body["user_type"] == "staff"

    def test_inactive_staff_phone_is_not_a_login(self, client, db, owner_headers, staff):
        client.patch(f"/staff/{staff.id}", json={"status": "inactive"}, headers=owner_headers)
        r = otp_login(client, db, STAFF_PHONE, user_type="staff")
        assert r.status_code == 404


class TestSelectTenant:
    def test_switches_to_another_business_without_new_code(self, client, db, tenant, customer):
        other = create_tenant(db, business_name="Second Salon")
        second = create_customer(db, other.id, {"first_name": "Zeynep", "phone": CUSTOMER_PHONE})
        first = otp_login(client, db, CUSTOMER_PHONE, tenant_id=tenant.id).json()
        assert first["customer"]["id"] == customer.id

        r = client.post(
            "/auth/select-tenant",
            json={"tenant_id": other.id},
            headers={"Authorization": f"Bearer {first['token']}"},
        )
        assert r.status_code == 200
        body = r.json()
        assert body["customer"]["id"] == second.id
        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"}).json()
        assert me["session"]["tenant_id"] == other.id
        assert me["session"]["customer_id"] == second.id

    def test_unregistered_business_is_403(self, client, db, customer_headers):
        other = create_tenant(db, business_name="Stranger Salon")
        r = client.post("/auth/select-tenant", json={"tenant_id": other.id}, headers=customer_headers)
        assert r.status_code == 403
        assert r.json()["code"] == "forbidden"

    def test_session_without_phone_is_403(self, client, db, owner_headers, tenant):
        r = client.post("/auth/select-tenant", json={"tenant_id": tenant.id}, headers=owner_headers)
        assert r.status_code == 403

    def test_requires_a_session(self, client, tenant):
        r = client.post("/auth/select-tenant", json={"tenant_id": tenant.id})
        assert r.status_code == 401
