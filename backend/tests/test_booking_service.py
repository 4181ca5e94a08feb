"""
Tests for the booking writer at the service layer, including the database-level guard.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from conftest import TOMORROW

from app.core.errors import NotFoundError, SlotUnavailableError, ValidationFailed
from app.models.appointment import Appointment
from app.services.appointment_service import book_appointment, is_active_slot_violation
from app.services.customer_service import create_customer
from app.services.staff_service import create_staff
from app.services.tenant_service import create_tenant


def _book(db, clock, tenant, staff, service, customer, time="11:00", **kwargs):
    return book_appointment(
        db,
        tenant.id,
        staff_id=staff.id,
        service_id=service.id,
        customer_id=customer.id,
        date_str=TOMORROW,
        time_str=time,
        clock=clock,
        **kwargs,
    )


class TestBookAppointment:
    def test_creates_pending_row_with_snapshot(self, db, clock, tenant, staff, service, customer):
        apt = _book(db, clock, tenant, staff, service, customer)
        assert apt.status == "pending"
        assert apt.duration == 45
        assert float(apt.price) == 250.0
        assert apt.reminder_sent_at is None

    def test_snapshot_survives_service_price_change(self, db, clock, tenant, staff, service, customer):
        apt = _book(db, clock, tenant, staff, service, customer)
        service.price = 400
        db.commit()
        db.refresh(apt)
        assert float(apt.price) == 250.0

    def test_conflict_without_slot_validation(self, db, clock, tenant, staff, service, customer):
        _book(db, clock, tenant, staff, service, customer, validate_slot=False)
        with pytest.raises(SlotUnavailableError):
            _book(db, clock, tenant, staff, service, customer, validate_slot=False)

    def test_conflict_with_slot_validation(self, db, clock, tenant, staff, service, customer):
        _book(db, clock, tenant, staff, service, customer)
        with pytest.raises(SlotUnavailableError) as exc:
            _book(db, clock, tenant, staff, service, customer)
        assert exc.value.status_code == 409
        assert exc.value.code == "slot_unavailable"

    def test_rows_from_another_tenant_are_not_found(self, db, clock, tenant, staff, service, customer):
        other = create_tenant(db, business_name="Other Salon")
        other_staff = create_staff(db, other.id, {"first_name": "Ali"})
        with pytest.raises(NotFoundError):
            _book(db, clock, tenant, other_staff, service, customer)
        other_customer = create_customer(db, other.id, {"first_name": "Eda", "phone": "05550000000"})
        with pytest.raises(NotFoundError):
            _book(db, clock, tenant, staff, service, other_customer)

    def test_bad_date_format(self, db, clock, tenant, staff, service, customer):
        with pytest.raises(ValidationFailed):
            book_appointment(
                db, tenant.id, staff_id=staff.id, service_id=service.id, customer_id=customer.id,
                date_str="2026-13-01", time_str="11:00", clock=clock,
            )


class TestActiveSlotIndex:
    def _row(self, tenant, staff, service, customer, status="pending"):
        return Appointment(
            tenant_id=tenant.id,
            staff_id=staff.id,
            customer_id=customer.id,
            service_id=service.id,
            date=TOMORROW,
            time="11:00",
            status=status,
        )

    def test_second_live_row_for_same_slot_is_rejected(self, db, tenant, staff, service, customer):
        db.add(self._row(tenant, staff, service, customer))
        db.commit()
        db.add(self._row(tenant, staff, service, customer, status="confirmed"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_cancelled_rows_do_not_hold_the_slot(self, db, tenant, staff, service, customer):
        db.add(self._row(tenant, staff, service, customer, status="cancelled"))
        db.add(self._row(tenant, staff, service, customer, status="cancelled"))
        db.add(self._row(tenant, staff, service, customer))
        db.commit()
        assert db.query(Appointment).count() == 3

    def _integrity_error(self, db, row) -> IntegrityError:
        db.add(row)
        with pytest.raises(IntegrityError) as exc:
            db.flush()
        db.rollback()
        return exc.value

    def test_slot_collision_is_recognised(self, db, tenant, staff, service, customer):
        db.add(self._row(tenant, staff, service, customer))
        db.commit()
        error = self._integrity_error(db, self._row(tenant, staff, service, customer))
        assert is_active_slot_violation(error)

    def test_other_integrity_errors_are_not_slot_collisions(self, db, tenant, staff, service, customer):
        row = self._row(tenant, staff, service, customer)
        row.date = None
        error = self._integrity_error(db, row)
        assert not is_active_slot_violation(error)

    def test_postgres_message_names_the_index(self):
        error = IntegrityError(
            "INSERT INTO appointments ...",
            {},
            Exception('duplicate key value violates unique constraint "uq_appointments_active_slot"'),
        )
        assert is_active_slot_violation(error)
        fk = IntegrityError("INSERT ...", {}, Exception('violates foreign key constraint "appointments_staff_id_fkey"'))
        assert not is_active_slot_violation(fk)
