from fastapi import FastAPI
from contextlib import asynccontextmanager
from .database import create_db_tables, get_db
from fastapi.middleware.cors import CORSMiddleware
from .models.appointment_models import AppointmentCreate, AppointmentOut, AppointmentUpdate
from .models.blocked_date_models import BlockDatesRequest, BlockedDateOut, UnblockDatesRequest
from .models.booking_month_models import MONTH_PATTERN, BookingMonthUpdate
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Depends, HTTPException, Query
from datetime import date, timedelta
from functools import lru_cache
from uuid import UUID
from .booking_service import BookingService, DateLocks
from .errors import AppointmentNotFoundError, BookingError
from .opening_hours import ScheduleConfig, get_day_schedule
from .service_catalog import services
from .settings import settings
from .store import AppointmentStore
from .utils import month_bounds
import logging

# Setup logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("podology")

LOOKAHEAD_DAYS = 14

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up podology booking backend...")
    logger.info("CREATING DATABASE TABLES...")
    await create_db_tables()
    logger.info("Database tables created successfully.")

    yield
    logger.info("Shutting down podology booking backend...")

# FastAPI application
app = FastAPI(
    lifespan=lifespan,
    title="Podology Booking Backend",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --------- DEPENDENCIES ---------

date_locks = DateLocks()

@lru_cache
def get_schedule_config() -> ScheduleConfig:
    return ScheduleConfig.from_settings(settings)

def get_store(db: AsyncSession = Depends(get_db)) -> AppointmentStore:
    return AppointmentStore(db)

def get_booking_service(
    store: AppointmentStore = Depends(get_store),
    config: ScheduleConfig = Depends(get_schedule_config),
) -> BookingService:
    return BookingService(store, config, date_locks)

def not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Agendamento não encontrado.")


# --------- ENDPOINTS---------

@app.get("/")
async def root():
    return {"message": "Welcome to the podology booking API"}

@app.get("/health", include_in_schema=False)
@app.head("/health", include_in_schema=False)
def health_check():
    return {"status": "ok"}

@app.get("/services")
async def list_services():
    return services

@app.get("/schedule/{day}")
async def get_schedule(
    day: date,
    store: AppointmentStore = Depends(get_store),
    config: ScheduleConfig = Depends(get_schedule_config),
):
    """Opening hours that apply on one date, and whether it is bookable at all."""
    schedule = get_day_schedule(day, config)
    blocked = await store.is_blocked(day)
    return {"date": str(day), **schedule.model_dump(by_alias=True), "isBlocked": blocked}


@app.get("/appointments/available-times/{day}")
async def get_available_times(
    day: date,
    service_id: str | None = None,
    duration: int | None = Query(default=None, gt=0),
    hourly: bool = True,
    exclude_id: UUID | None = None,
    search_ahead: bool = False,
    booking: BookingService = Depends(get_booking_service),
):
    """Start times that are free for the requested service.

    With `search_ahead`, moves on to the following days (up to two weeks)
    until one has a free slot. Advisory only: the booking is checked again
    on creation.
    """
    service_minutes = booking.service_duration(service_id, duration)
    check_date = day

    for _ in range(LOOKAHEAD_DAYS if search_ahead else 1):
        available = await booking.available_times(check_date, service_minutes, hourly, exclude_id)
        if available:
            return {"date": str(check_date), "duration": service_minutes, "available": available}
        check_date += timedelta(days=1)

    return {"date": None if search_ahead else str(day), "duration": service_minutes, "available": []}


@app.post("/appointments", response_model=AppointmentOut, status_code=201)
async def create_appointment(data: AppointmentCreate, booking: BookingService = Depends(get_booking_service)):
    """Create a new appointment after re-checking the slot against the live agenda."""
    try:
        return await booking.create(data)
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@app.get("/appointments", response_model=list[AppointmentOut])
async def list_appointments(
    data: date | None = None,
    store: AppointmentStore = Depends(get_store),
):
    if data is not None:
        return await store.list_for_date(data, include_cancelled=True)
    return await store.list_all()


@app.get("/appointments/{appointment_id}", response_model=AppointmentOut)
async def get_appointment(appointment_id: UUID, booking: BookingService = Depends(get_booking_service)):
    try:
        return await booking.get(appointment_id)
    except AppointmentNotFoundError:
        raise not_found()


@app.patch("/appointments/{appointment_id}", response_model=AppointmentOut)
async def update_appointment(
    appointment_id: UUID,
    changes: AppointmentUpdate,
    booking: BookingService = Depends(get_booking_service),
):
    """Partial update; moving or re-activating an appointment is validated again."""
    try:
        return await booking.update(appointment_id, changes)
    except AppointmentNotFoundError:
        raise not_found()
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@app.delete("/appointments/{appointment_id}")
async def delete_appointment(appointment_id: UUID, booking: BookingService = Depends(get_booking_service)):
    try:
        await booking.delete(appointment_id)
    except AppointmentNotFoundError:
        raise not_found()
    return {"message": "Agendamento removido."}


# --------- BLOCKED DATES ---------

@app.get("/settings/blocked-dates")
async def list_blocked_dates(
    month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    store: AppointmentStore = Depends(get_store),
):
    start = end = None
    if month:
        start, end = month_bounds(month)
    rows = await store.blocked_dates_between(start, end)
    return {"blockedDates": [BlockedDateOut.model_validate(r).model_dump(by_alias=True) for r in rows]}


@app.post("/settings/blocked-dates")
async def block_dates(req: BlockDatesRequest, store: AppointmentStore = Depends(get_store)):
    rows = await store.block_dates(req.dates, req.reason)
    logger.info("Blocked %d date(s)", len(req.dates))
    return {
        "message": f"{len(req.dates)} data(s) bloqueada(s) com sucesso.",
        "blockedDates": [BlockedDateOut.model_validate(r).model_dump(by_alias=True) for r in rows],
    }


@app.delete("/settings/blocked-dates")
async def unblock_dates(req: UnblockDatesRequest, store: AppointmentStore = Depends(get_store)):
    await store.unblock_dates(req.dates)
    logger.info("Unblocked %d date(s)", len(req.dates))
    return {"message": f"{len(req.dates)} data(s) desbloqueada(s) com sucesso."}


# --------- MONTHLY BOOKING SWITCH ---------

@app.get("/settings")
async def get_booking_settings(
    month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    store: AppointmentStore = Depends(get_store),
):
    """Whether online booking is open for one month, or the setting of every month."""
    if month:
        return {"month": month, "bookingsEnabled": await store.bookings_enabled(month)}
    return {"bookingsEnabledByMonth": await store.booking_months()}


@app.post("/settings")
async def update_booking_settings(req: BookingMonthUpdate, store: AppointmentStore = Depends(get_store)):
    await store.set_bookings_enabled(req.month, req.bookings_enabled)
    logger.info("Bookings for %s %s", req.month, "opened" if req.bookings_enabled else "closed")
    return {
        "month": req.month,
        "bookingsEnabled": req.bookings_enabled,
        "message": "Agendamentos abertos" if req.bookings_enabled else "Agendamentos fechados",
    }
