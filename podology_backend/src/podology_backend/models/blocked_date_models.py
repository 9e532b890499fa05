import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlalchemy import Date, DateTime
from sqlmodel import SQLModel, Field, Column, String

from podology_backend.models.appointment_models import utc_now


class BlockedDate(SQLModel, table=True):
    """A single calendar day the practitioner is unavailable (holiday, leave)."""
    __tablename__ = "blocked_dates"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: dt.date = Field(sa_column=Column(Date, nullable=False, unique=True, index=True))
    reason: Optional[str] = Field(default=None, sa_column=Column(String))
    created_at: dt.datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False, default=utc_now))


class BlockDatesRequest(BaseModel):
    dates: list[dt.date] = PydanticField(min_length=1)
    reason: str | None = None


class UnblockDatesRequest(BaseModel):
    dates: list[dt.date] = PydanticField(min_length=1)


class BlockedDateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: dt.date
    reason: str | None = None
    created_at: dt.datetime | None = PydanticField(default=None, serialization_alias="createdAt")
