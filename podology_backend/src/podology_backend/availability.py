"""
availability.py
Slot generation and blocked-time conflict detection.

Every appointment occupies [start, start + duration + hygienization buffer)
for conflict purposes. The buffer is applied to the candidate and to each
booked appointment alike, so back-to-back bookings only touch.

These functions are pure. The booking UI runs them for display; the booking
validator runs the very same functions again before every write.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from podology_backend.models.appointment_models import AppointmentStatus
from podology_backend.opening_hours import REFERENCE_SCHEDULE, ScheduleConfig, get_day_schedule
from podology_backend.utils import minutes_to_time, month_key, parse_date, time_to_minutes


@dataclass(frozen=True)
class BookedInterval:
    start: int
    end: int

    @classmethod
    def for_appointment(cls, hora: str, duration, config: ScheduleConfig = REFERENCE_SCHEDULE) -> "BookedInterval":
        start = time_to_minutes(hora)
        minutes = _coerce_duration(duration, config.default_duration_minutes)
        return cls(start, start + get_total_blocked_time(minutes, config))

    def overlaps(self, other: "BookedInterval") -> bool:
        # Touching intervals (one ends exactly where the other starts) are fine.
        return self.start < other.end and self.end > other.start


def _coerce_duration(value, default: int) -> int:
    """A booked row's duration, or the default if missing or malformed."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return default
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return default


def appointment_field(appointment: Any, *names: str):
    """Read the first present attribute/key out of a model or a plain dict."""
    for name in names:
        if isinstance(appointment, dict):
            if name in appointment:
                return appointment[name]
        elif hasattr(appointment, name):
            return getattr(appointment, name)
    return None


def conflict_set(existing: Iterable[Any], exclude_id=None) -> list[Any]:
    """Appointments that still hold their slot: not cancelled, not `exclude_id`."""
    kept = []
    for appointment in existing:
        if exclude_id is not None and str(appointment_field(appointment, "id")) == str(exclude_id):
            continue
        status = AppointmentStatus.coerce(appointment_field(appointment, "status"))
        if status is AppointmentStatus.CANCELLED:
            continue
        kept.append(appointment)
    return kept


def appointment_interval(appointment: Any, config: ScheduleConfig = REFERENCE_SCHEDULE) -> BookedInterval:
    """Blocked interval of a persisted appointment (model instance or row dict)."""
    hora = appointment_field(appointment, "hora") or ""
    if not isinstance(hora, str):
        hora = hora.strftime("%H:%M")
    duration = appointment_field(appointment, "duracao_minutos", "duracaoMinutos")
    return BookedInterval.for_appointment(hora, duration, config)


def get_total_blocked_time(service_duration_minutes: int, config: ScheduleConfig = REFERENCE_SCHEDULE) -> int:
    """Service duration plus the hygienization buffer."""
    return service_duration_minutes + config.hygienization_minutes


def generate_time_slots(
    day: date | str,
    hourly_only: bool = True,
    config: ScheduleConfig = REFERENCE_SCHEDULE,
) -> list[str]:
    """Candidate start times from opening to last start, inclusive.

    Hourly lists always end on the exact last start even when the hourly
    steps skip it. Closed days are not special-cased here.
    """
    schedule = get_day_schedule(day, config)
    start = time_to_minutes(schedule.opening)
    end = time_to_minutes(schedule.last_start)
    interval = 60 if hourly_only else config.slot_interval

    slots = [minutes_to_time(m) for m in range(start, end + 1, interval)]

    if hourly_only and schedule.last_start not in slots:
        slots.append(schedule.last_start)

    return slots


def is_slot_available(
    candidate_start: str,
    service_duration_minutes: int,
    booked_appointments: Iterable[Any],
    day: date | str,
    config: ScheduleConfig = REFERENCE_SCHEDULE,
) -> bool:
    """Whether a service of the given duration can start at `candidate_start`.

    Rejects starts after the day's last start and services running past
    closing, then any overlap with a booked appointment's blocked interval.
    Booked appointments are anything exposing `hora` and `duracao_minutos`
    (or a dict with `hora` / `duracaoMinutos`); a missing duration counts
    as the default.
    """
    slot_start = time_to_minutes(candidate_start)
    slot_end = slot_start + get_total_blocked_time(service_duration_minutes, config)
    candidate = BookedInterval(slot_start, slot_end)

    schedule = get_day_schedule(day, config)
    if slot_end > time_to_minutes(schedule.closing):
        return False
    if slot_start > time_to_minutes(schedule.last_start):
        return False

    for appointment in booked_appointments:
        if candidate.overlaps(appointment_interval(appointment, config)):
            return False

    return True


def get_available_slots(
    day: date | str,
    service_duration_minutes: int,
    booked_appointments: Iterable[Any],
    hourly_only: bool = True,
    config: ScheduleConfig = REFERENCE_SCHEDULE,
    blocked_dates: Iterable[date] = (),
    exclude_id=None,
    closed_months: Iterable[str] = (),
) -> list[str]:
    """Start times the booking UI may offer for `day`. Advisory only.

    Rows are filtered exactly as the booking validator filters them:
    cancelled appointments and `exclude_id` never hold a slot.
    """
    day = parse_date(day)
    if month_key(day) in set(closed_months):
        return []
    if get_day_schedule(day, config).is_closed or day in set(blocked_dates):
        return []

    booked = conflict_set(booked_appointments, exclude_id)
    return [
        slot
        for slot in generate_time_slots(day, hourly_only, config)
        if is_slot_available(slot, service_duration_minutes, booked, day, config)
    ]
