"""
Tests for slot generation, busy marking, the past-time filter and the composed pipeline.
"""
from datetime import date, datetime
from types import SimpleNamespace

from app.services.scheduling import (
    booked_times,
    compute_availability,
    drop_past,
    generate_slots,
    mark_busy,
)

TUESDAY = date(2026, 3, 10)
WEEK = {"tuesday": {"start": "09:00", "end": "12:00", "closed": False}}


def apt(time, status="pending"):
    return SimpleNamespace(time=time, status=status)


class TestGenerateSlots:
    def test_end_is_exclusive(self):
        assert generate_slots("09:00", "11:00", 30) == ["09:00", "09:30", "10:00", "10:30"]

    def test_last_slot_may_not_fit_a_full_interval(self):
        assert generate_slots("09:00", "10:00", 45) == ["09:00", "09:45"]

    def test_count_is_floor_of_range_over_interval(self):
        slots = generate_slots("09:00", "18:00", 20)
        assert len(slots) == (18 - 9) * 60 // 20
        assert slots[0] == "09:00" and slots[-1] == "17:40"

    def test_zero_padded_output(self):
        assert generate_slots("00:00", "01:00", 25) == ["00:00", "00:25", "00:50"]

    def test_degenerate_inputs_return_empty(self):
        assert generate_slots("09:00", "09:00", 30) == []
        assert generate_slots("10:00", "09:00", 30) == []
        assert generate_slots("09:00", "10:00", 0) == []
        assert generate_slots("09:00", "10:00", -15) == []
        assert generate_slots("bad", "10:00", 15) == []


class TestBusyTimes:
    def test_cancelled_appointments_do_not_block(self):
        booked = booked_times([apt("09:30"), apt("10:00", "cancelled"), apt("11:00", "completed")])
        assert booked == {"09:30", "11:00"}

    def test_seconds_are_truncated(self):
        assert booked_times([apt("09:30:00")]) == {"09:30"}

    def test_only_exact_start_is_busy(self):
        # A 45-minute appointment at 09:00 does not block 09:30
        slots = mark_busy(["09:00", "09:30"], {"09:00"})
        assert [(s.time, s.available) for s in slots] == [("09:00", False), ("09:30", True)]


class TestDropPast:
    def test_not_today_keeps_everything(self):
        assert drop_past(["09:00", "09:30"], False, 24 * 60) == ["09:00", "09:30"]

    def test_today_drops_current_and_earlier_minutes(self):
        assert drop_past(["09:00", "09:30", "10:00"], True, 9 * 60 + 30) == ["10:00"]


class TestComputeAvailability:
    def test_pipeline_removes_past_then_marks_busy(self):
        now = datetime(2026, 3, 10, 9, 45)
        result = compute_availability(TUESDAY, WEEK, None, 30, [apt("10:30")], now)
        assert not result.closed
        assert [s.time for s in result.slots] == ["10:00", "10:30", "11:00", "11:30"]
        assert result.available_times == ["10:00", "11:00", "11:30"]
        assert result.is_bookable("11:00")
        assert not result.is_bookable("10:30")

    def test_closed_day_has_no_slots_and_a_reason(self):
        result = compute_availability(date(2026, 3, 11), WEEK, None, 30, [], datetime(2026, 3, 10, 8, 0))
        assert result.closed
        assert result.slots == []
        assert result.hours.reason

    def test_future_date_ignores_current_time(self):
        result = compute_availability(TUESDAY, WEEK, None, 60, [], datetime(2026, 3, 9, 23, 0))
        assert result.available_times == ["09:00", "10:00", "11:00"]

    def test_after_closing_today_nothing_is_left(self):
        result = compute_availability(TUESDAY, WEEK, None, 30, [], datetime(2026, 3, 10, 12, 30))
        assert not result.closed
        assert result.slots == []


class TestEndToEndScenarios:
    OPEN_WEEK = {
        "tuesday": {"start": "09:00", "end": "18:00", "closed": False},
        "sunday": {"start": "10:00", "end": "16:00", "closed": False},
    }
    BEFORE = datetime(2026, 3, 1, 8, 0)

    def test_open_day_with_no_bookings(self):
        result = compute_availability(TUESDAY, self.OPEN_WEEK, None, 30, [], self.BEFORE)
        assert len(result.available_times) == 18
        assert result.available_times[0] == "09:00" and result.available_times[-1] == "17:30"

    def test_confirmed_blocks_cancelled_does_not(self):
        confirmed = compute_availability(TUESDAY, self.OPEN_WEEK, None, 30, [apt("09:30", "confirmed")], self.BEFORE)
        cancelled = compute_availability(TUESDAY, self.OPEN_WEEK, None, 30, [apt("09:30", "cancelled")], self.BEFORE)
        assert "09:30" not in confirmed.available_times
        assert "09:30" in cancelled.available_times

    def test_staff_closes_a_day_the_business_opens(self):
        result = compute_availability(date(2026, 3, 15), self.OPEN_WEEK, {"sunday": {"closed": True}}, 30, [], self.BEFORE)
        assert result.closed
        assert result.hours.reason == "Staff member does not work on Sunday"
