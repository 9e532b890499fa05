"""Shared test fixtures."""
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from podology_backend.booking_service import BookingService, DateLocks
from podology_backend.models.appointment_models import Appointment, AppointmentStatus
from podology_backend.models.blocked_date_models import BlockedDate
from podology_backend.opening_hours import ScheduleConfig

MONDAY = date(2026, 2, 16)
TUESDAY = date(2026, 2, 17)
THURSDAY = date(2026, 2, 19)
SATURDAY = date(2026, 2, 14)
SUNDAY = date(2026, 2, 15)


class FakeAppointmentStore:
    """In-memory stand-in for AppointmentStore with the same unique-slot rule."""

    def __init__(self):
        self.appointments: dict = {}
        self.blocked: dict = {}
        self.months: dict = {}
        self.commits = 0

    def _active_slot_taken(self, appointment) -> bool:
        if appointment.status == AppointmentStatus.CANCELLED.value:
            return False
        return any(
            other.id != appointment.id
            and other.data == appointment.data
            and other.hora == appointment.hora
            and other.status != AppointmentStatus.CANCELLED.value
            for other in self.appointments.values()
        )

    async def list_for_date(self, day, exclude_id=None, include_cancelled=False):
        rows = [
            a for a in self.appointments.values()
            if a.data == day
            and (include_cancelled or a.status != AppointmentStatus.CANCELLED.value)
            and (exclude_id is None or a.id != exclude_id)
        ]
        return sorted(rows, key=lambda a: a.hora)

    async def list_all(self):
        return sorted(self.appointments.values(), key=lambda a: (a.data, a.hora))

    async def references_for_date(self, day):
        return [a.reference for a in self.appointments.values() if a.data == day and a.reference]

    async def get(self, appointment_id):
        return self.appointments.get(appointment_id)

    async def add(self, appointment):
        if self._active_slot_taken(appointment):
            raise IntegrityError("INSERT INTO appointments", {}, Exception("uq_appointments_active_slot"))
        self.appointments[appointment.id] = appointment
        return appointment

    async def delete(self, appointment):
        self.appointments.pop(appointment.id, None)

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        pass

    async def refresh(self, instance):
        pass

    async def blocked_dates_between(self, start=None, end=None):
        return [
            b for d, b in sorted(self.blocked.items())
            if (start is None or d >= start) and (end is None or d <= end)
        ]

    async def is_blocked(self, day):
        return day in self.blocked

    async def block_dates(self, days, reason=None):
        for d in sorted(set(days)):
            if d not in self.blocked:
                self.blocked[d] = BlockedDate(id=len(self.blocked) + 1, date=d, reason=reason)
        return [self.blocked[d] for d in sorted(set(days))]

    async def unblock_dates(self, days):
        for d in days:
            self.blocked.pop(d, None)

    async def booking_months(self):
        return dict(sorted(self.months.items()))

    async def bookings_enabled(self, month):
        return self.months.get(month, True)

    async def set_bookings_enabled(self, month, enabled):
        self.months[month] = enabled


def make_appointment(day=MONDAY, hora="09:00", duracao_minutos=60, status="pending", **extra):
    fields = dict(
        servico="Terapia Podal",
        servico_id="terapia-podal",
        preco=30,
        data=day,
        hora=hora,
        duracao_minutos=duracao_minutos,
        nome="Maria Silva",
        telefone="912345678",
        status=status,
    )
    fields.update(extra)
    return Appointment(**fields)


@pytest.fixture
def store():
    return FakeAppointmentStore()


@pytest.fixture
def buffered_config():
    """Reference hours with a 15 minute hygienization buffer."""
    return ScheduleConfig(hygienization_minutes=15)


@pytest.fixture
def booking(store, buffered_config):
    return BookingService(store, buffered_config, DateLocks())


@pytest.fixture
def add_existing(store):
    """Put an appointment straight into the fake store."""
    def _add(**kwargs):
        appointment = make_appointment(**kwargs)
        store.appointments[appointment.id] = appointment
        return appointment
    return _add
