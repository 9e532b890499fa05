import datetime as dt

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlalchemy import Boolean, DateTime
from sqlmodel import SQLModel, Field, Column, String

from podology_backend.models.appointment_models import utc_now

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class BookingMonth(SQLModel, table=True):
    """Whether the public booking flow is open for one calendar month.

    Months without a row are open.
    """
    __tablename__ = "booking_months"

    month: str = Field(sa_column=Column(String(7), primary_key=True))
    bookings_enabled: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))
    updated_at: dt.datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False, default=utc_now))


class BookingMonthUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    month: str = PydanticField(pattern=MONTH_PATTERN)
    bookings_enabled: bool = PydanticField(alias="bookingsEnabled")
