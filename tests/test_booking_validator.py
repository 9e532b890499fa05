"""Test the authoritative booking check."""
import pytest

from conftest import MONDAY, SUNDAY, TUESDAY, make_appointment
from podology_backend.booking_validator import conflict_set, validate_booking
from podology_backend.errors import (
    BookingsClosedError,
    ClosingTimeExceededError,
    DayClosedError,
    LastStartExceededError,
    SlotConflictError,
)
from podology_backend.opening_hours import ScheduleConfig

BUFFERED = ScheduleConfig(hygienization_minutes=15)


def test_free_slot_passes():
    validate_booking(MONDAY, "10:15", 60, [make_appointment(hora="09:00")], BUFFERED)


def test_start_after_last_start_rejected_before_overlap_check():
    existing = [make_appointment(hora="17:00")]
    with pytest.raises(LastStartExceededError) as exc_info:
        validate_booking(MONDAY, "17:45", 30, existing)
    assert "17:30" in exc_info.value.message


def test_tuesday_uses_its_own_last_start():
    with pytest.raises(LastStartExceededError) as exc_info:
        validate_booking(TUESDAY, "16:00", 30, [])
    assert exc_info.value.last_start == "15:30"


def test_service_past_closing_rejected():
    with pytest.raises(ClosingTimeExceededError) as exc_info:
        validate_booking(MONDAY, "17:30", 60, [], BUFFERED)
    assert "18:30" in exc_info.value.message


def test_overlap_rejected_with_generic_message():
    existing = [make_appointment(hora="09:00", nome="Joana Costa")]
    with pytest.raises(SlotConflictError) as exc_info:
        validate_booking(MONDAY, "10:10", 60, existing, BUFFERED)
    assert "Joana" not in exc_info.value.message
    assert exc_info.value.status_code == 409


def test_cancelled_appointment_frees_its_slot():
    existing = [make_appointment(hora="10:00", status="cancelled")]
    validate_booking(MONDAY, "10:00", 60, existing, BUFFERED)


def test_appointment_never_conflicts_with_itself():
    appointment = make_appointment(hora="10:00")
    validate_booking(MONDAY, "10:00", 60, [appointment], BUFFERED, exclude_id=appointment.id)
    validate_booking(MONDAY, "10:30", 60, [appointment], BUFFERED, exclude_id=str(appointment.id))


def test_closed_day_rejected():
    with pytest.raises(DayClosedError):
        validate_booking(SUNDAY, "10:00", 60, [])


def test_blocked_date_rejected():
    with pytest.raises(DayClosedError):
        validate_booking(MONDAY, "10:00", 60, [], blocked_dates=[MONDAY])


def test_conflict_set_accepts_plain_rows():
    rows = [
        {"id": "a", "hora": "09:00", "status": "pending"},
        {"id": "b", "hora": "10:00", "status": "cancelled"},
        {"id": "c", "hora": "11:00", "status": "confirmed"},
    ]
    assert [r["id"] for r in conflict_set(rows, exclude_id="c")] == ["a"]


def test_closed_month_rejected_before_anything_else():
    with pytest.raises(BookingsClosedError):
        validate_booking(SUNDAY, "19:00", 60, [], closed_months=["2026-02"])
    validate_booking(MONDAY, "10:00", 60, [], closed_months=["2026-03"])
