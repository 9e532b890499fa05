"""
booking_service.py
Reads the live appointments, validates, then writes.

Reading and writing are separate round trips to the store. Two safeguards
keep two requests from taking the same slot:
- inside one process, writes for a given date run one at a time
  (`DateLocks`);
- across processes, the partial unique index on (data, hora) rejects the
  second insert, which is reported as SlotNoLongerAvailableError.
"""

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from podology_backend.availability import get_available_slots
from podology_backend.booking_validator import validate_booking
from podology_backend.errors import (
    AppointmentNotFoundError,
    BookingError,
    SlotNoLongerAvailableError,
)
from podology_backend.models.appointment_models import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    utc_now,
)
from podology_backend.opening_hours import ScheduleConfig
from podology_backend.service_catalog import get_service_by_id
from podology_backend.store import AppointmentStore
from podology_backend.utils import month_key, resolve_duration

logger = logging.getLogger("podology.booking")

REFERENCE_PREFIX = "STP"
_REFERENCE_SUFFIX_RE = re.compile(r"-(\d+)$")


class DateLocks:
    """One asyncio.Lock per calendar date, dropped once nobody holds or waits on it."""

    def __init__(self):
        self._locks: dict[date, asyncio.Lock] = {}
        self._users: dict[date, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, day: date):
        lock = self._locks.setdefault(day, asyncio.Lock())
        self._users[day] = self._users.get(day, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[day] -= 1
            if not self._users[day]:
                del self._users[day]
                del self._locks[day]


def next_reference(day: date, issued: list[str]) -> str:
    """Next 'STP-YYYYMMDD-NNN' reference after the ones already issued for `day`."""
    highest = 0
    for reference in issued:
        match = _REFERENCE_SUFFIX_RE.search(reference or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{REFERENCE_PREFIX}-{day.strftime('%Y%m%d')}-{highest + 1:03d}"


class BookingService:
    def __init__(self, store: AppointmentStore, config: ScheduleConfig, locks: DateLocks):
        self.store = store
        self.config = config
        self.locks = locks

    def service_duration(self, service_id: str | None, duration: int | None = None) -> int:
        """Explicit duration wins; otherwise the catalog's, otherwise the default."""
        if duration:
            return duration
        service = get_service_by_id(service_id) if service_id else None
        if service is None:
            return self.config.default_duration_minutes
        return resolve_duration(service["duration"])

    async def _day_restrictions(self, day: date) -> tuple[list[date], list[str]]:
        """Administrator blocks that apply to `day`: blocked dates, closed months."""
        blocked = [day] if await self.store.is_blocked(day) else []
        month = month_key(day)
        closed = [] if await self.store.bookings_enabled(month) else [month]
        return blocked, closed

    async def available_times(
        self,
        day: date,
        duration: int,
        hourly_only: bool = True,
        exclude_id: UUID | None = None,
    ) -> list[str]:
        booked = await self.store.list_for_date(day)
        blocked, closed = await self._day_restrictions(day)
        return get_available_slots(
            day, duration, booked, hourly_only, self.config, blocked, exclude_id, closed
        )

    async def _validate(self, day: date, hora: str, duration: int, exclude_id=None) -> None:
        existing = await self.store.list_for_date(day)
        blocked, closed = await self._day_restrictions(day)
        validate_booking(day, hora, duration, existing, self.config, exclude_id, blocked, closed)

    async def create(self, data: AppointmentCreate) -> Appointment:
        service = get_service_by_id(data.servico_id) if data.servico_id else None
        name = data.servico or (service["name"] if service else None)
        if not name:
            raise BookingError("Serviço não encontrado.")
        duration = self.service_duration(data.servico_id, data.duracao_minutos)
        price = data.preco if data.preco is not None else (service["price"] if service else 0)

        async with self.locks.hold(data.data):
            try:
                await self._validate(data.data, data.hora, duration)
            except BookingError as e:
                logger.info("Booking rejected for %s %s: %s", data.data, data.hora, e.message)
                raise

            appointment = Appointment(
                reference=next_reference(data.data, await self.store.references_for_date(data.data)),
                servico=name,
                servico_id=data.servico_id,
                preco=price,
                data=data.data,
                hora=data.hora,
                duracao_minutos=duration,
                nome=data.nome,
                telefone=data.telefone,
                email=data.email,
                observacoes=data.observacoes,
                status=AppointmentStatus.PENDING.value,
            )
            await self._write(appointment)

        logger.info("Booking %s created for %s %s (%d min)", appointment.reference, data.data, data.hora, duration)
        return appointment

    async def update(self, appointment_id: UUID, changes: AppointmentUpdate) -> Appointment:
        appointment = await self.get(appointment_id)
        fields = changes.model_dump(exclude_unset=True)
        if fields.get("status") is not None:
            fields["status"] = AppointmentStatus(fields["status"]).value

        day = fields.get("data") or appointment.data
        hora = fields.get("hora") or appointment.hora
        duration = fields.get("duracao_minutos") or appointment.duracao_minutos
        was_cancelled = AppointmentStatus.coerce(appointment.status) is AppointmentStatus.CANCELLED
        status = AppointmentStatus.coerce(fields.get("status") or appointment.status)

        moved = (
            day != appointment.data
            or hora != appointment.hora
            or duration != appointment.duracao_minutos
        )
        reactivated = was_cancelled and status is not AppointmentStatus.CANCELLED

        async with self.locks.hold(day):
            if (moved or reactivated) and status is not AppointmentStatus.CANCELLED:
                await self._validate(day, hora, duration, exclude_id=appointment.id)

            for key, value in fields.items():
                if value is not None:
                    setattr(appointment, key, value)
            appointment.updated_at = utc_now()
            await self._write(appointment)

        if "status" in fields and not was_cancelled and status is AppointmentStatus.CANCELLED:
            logger.info("Booking %s cancelled", appointment.reference)
        return appointment

    async def _write(self, appointment: Appointment) -> None:
        try:
            await self.store.add(appointment)
            await self.store.commit()
        except IntegrityError:
            await self.store.rollback()
            logger.warning("Lost race for %s %s; slot already taken", appointment.data, appointment.hora)
            raise SlotNoLongerAvailableError()
        await self.store.refresh(appointment)

    async def get(self, appointment_id: UUID) -> Appointment:
        appointment = await self.store.get(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(appointment_id)
        return appointment

    async def delete(self, appointment_id: UUID) -> None:
        appointment = await self.get(appointment_id)
        await self.store.delete(appointment)
        await self.store.commit()
        logger.info("Booking %s deleted", appointment.reference)
