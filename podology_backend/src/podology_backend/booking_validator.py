"""
booking_validator.py
Authoritative check of a booking request against the current appointments.

Whatever slot list the client was shown, the request is checked again here
before any write.
"""

from datetime import date
from typing import Any, Iterable

from podology_backend.availability import (
    BookedInterval,
    appointment_interval,
    conflict_set,
    get_total_blocked_time,
)
from podology_backend.errors import (
    BookingsClosedError,
    ClosingTimeExceededError,
    DayClosedError,
    LastStartExceededError,
    SlotConflictError,
)
from podology_backend.opening_hours import REFERENCE_SCHEDULE, ScheduleConfig, get_day_schedule
from podology_backend.utils import month_key, parse_date, time_to_minutes

__all__ = ["conflict_set", "validate_booking"]


def validate_booking(
    day: date | str,
    hora: str,
    duration_minutes: int,
    existing: Iterable[Any],
    config: ScheduleConfig = REFERENCE_SCHEDULE,
    exclude_id=None,
    blocked_dates: Iterable[date] = (),
    closed_months: Iterable[str] = (),
) -> None:
    """Raise the first reason a booking at `hora` on `day` is not allowed.

    Order: month closed for booking, closed or blocked day, start after the
    last permitted start, service running past closing, overlap with an
    existing appointment.
    """
    day = parse_date(day)
    if month_key(day) in set(closed_months):
        raise BookingsClosedError()

    schedule = get_day_schedule(day, config)
    if schedule.is_closed or day in set(blocked_dates):
        raise DayClosedError()

    start = time_to_minutes(hora)
    if start > time_to_minutes(schedule.last_start):
        raise LastStartExceededError(schedule.last_start)

    candidate = BookedInterval(start, start + get_total_blocked_time(duration_minutes, config))
    if candidate.end > time_to_minutes(schedule.closing):
        raise ClosingTimeExceededError(schedule.closing)

    for appointment in conflict_set(existing, exclude_id):
        if candidate.overlaps(appointment_interval(appointment, config)):
            raise SlotConflictError()
