from datetime import date
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from .models.appointment_models import Appointment, AppointmentStatus, utc_now
from .models.blocked_date_models import BlockedDate
from .models.booking_month_models import BookingMonth


class AppointmentStore:
    """
    Record store for appointments and blocked dates, backed by the practice's
    Postgres database. Only simple predicate queries; all scheduling decisions
    are made by the caller.
    """
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_date(
        self,
        day: date,
        exclude_id: Optional[UUID] = None,
        include_cancelled: bool = False,
    ) -> List[Appointment]:
        """
        Appointments on `day` ordered by start time. Cancelled ones are left
        out unless asked for; `exclude_id` drops one appointment (the one being
        rescheduled).
        """
        stmt = select(Appointment).where(Appointment.data == day)
        if not include_cancelled:
            stmt = stmt.where(Appointment.status != AppointmentStatus.CANCELLED.value)
        if exclude_id is not None:
            stmt = stmt.where(Appointment.id != exclude_id)
        stmt = stmt.order_by(Appointment.hora)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self) -> List[Appointment]:
        stmt = select(Appointment).order_by(Appointment.data, Appointment.hora)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def references_for_date(self, day: date) -> List[str]:
        """Booking references already issued for `day`, cancelled rows included."""
        stmt = select(Appointment.reference).where(
            Appointment.data == day, Appointment.reference.is_not(None)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, appointment_id: UUID) -> Optional[Appointment]:
        return await self.db.get(Appointment, appointment_id)

    async def add(self, appointment: Appointment) -> Appointment:
        """Insert and flush so constraint violations surface right here."""
        self.db.add(appointment)
        await self.db.flush()
        return appointment

    async def delete(self, appointment: Appointment) -> None:
        await self.db.delete(appointment)

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def refresh(self, instance) -> None:
        await self.db.refresh(instance)

    # --------- BLOCKED DATES ---------

    async def blocked_dates_between(self, start: Optional[date] = None, end: Optional[date] = None) -> List[BlockedDate]:
        stmt = select(BlockedDate)
        if start is not None:
            stmt = stmt.where(BlockedDate.date >= start)
        if end is not None:
            stmt = stmt.where(BlockedDate.date <= end)
        result = await self.db.execute(stmt.order_by(BlockedDate.date))
        return list(result.scalars().all())

    async def is_blocked(self, day: date) -> bool:
        result = await self.db.execute(select(BlockedDate.id).where(BlockedDate.date == day))
        return result.first() is not None

    async def block_dates(self, days: Iterable[date], reason: Optional[str] = None) -> List[BlockedDate]:
        """Block every day in `days`; days already blocked are left as they are."""
        days = sorted(set(days))
        stmt = (
            insert(BlockedDate)
            .values([{"date": d, "reason": reason} for d in days])
            .on_conflict_do_nothing(index_elements=["date"])
        )
        await self.db.execute(stmt)
        await self.db.commit()
        result = await self.db.execute(select(BlockedDate).where(BlockedDate.date.in_(days)).order_by(BlockedDate.date))
        return list(result.scalars().all())

    async def unblock_dates(self, days: Iterable[date]) -> None:
        await self.db.execute(delete(BlockedDate).where(BlockedDate.date.in_(list(days))))
        await self.db.commit()

    # --------- MONTHLY BOOKING SWITCH ---------

    async def booking_months(self) -> Dict[str, bool]:
        """Every month with an explicit setting, 'YYYY-MM' -> bookings enabled."""
        result = await self.db.execute(select(BookingMonth).order_by(BookingMonth.month))
        return {row.month: row.bookings_enabled for row in result.scalars().all()}

    async def bookings_enabled(self, month: str) -> bool:
        result = await self.db.execute(
            select(BookingMonth.bookings_enabled).where(BookingMonth.month == month)
        )
        enabled = result.scalar_one_or_none()
        return True if enabled is None else enabled

    async def set_bookings_enabled(self, month: str, enabled: bool) -> None:
        stmt = (
            insert(BookingMonth)
            .values(month=month, bookings_enabled=enabled, updated_at=utc_now())
            .on_conflict_do_update(
                index_elements=["month"],
                set_={"bookings_enabled": enabled, "updated_at": utc_now()},
            )
        )
        await self.db.execute(stmt)
        await self.db.commit()
