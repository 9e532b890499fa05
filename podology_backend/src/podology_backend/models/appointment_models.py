from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlalchemy import DateTime, Index, Integer, text
from sqlmodel import SQLModel, Field, Column, String

from podology_backend.utils import DEFAULT_DURATION_MINUTES

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
PHONE_PATTERN = r"^[0-9]{9}$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def coerce(cls, value) -> Optional["AppointmentStatus"]:
        """Map a stored status (enum or raw string) to the enum, None if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # One live appointment per (date, start time); cancelled rows free the slot.
    __table_args__ = (
        Index(
            "uq_appointments_active_slot",
            "data",
            "hora",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True, nullable=False)
    reference: Optional[str] = Field(default=None, sa_column=Column(String, unique=True, index=True))
    servico: str = Field(sa_column=Column(String, nullable=False))
    servico_id: Optional[str] = Field(default=None, sa_column=Column(String))
    preco: float = 0
    data: date = Field(index=True)
    hora: str = Field(sa_column=Column(String(5), nullable=False))
    duracao_minutos: int = Field(
        default=DEFAULT_DURATION_MINUTES,
        sa_column=Column(Integer, nullable=False, server_default=str(DEFAULT_DURATION_MINUTES)),
    )
    nome: str = Field(sa_column=Column(String, nullable=False))
    telefone: str = Field(sa_column=Column(String, nullable=False))
    email: Optional[str] = Field(default=None, sa_column=Column(String))
    observacoes: Optional[str] = Field(default=None, sa_column=Column(String))
    status: str = Field(
        default=AppointmentStatus.PENDING.value,
        sa_column=Column(String, nullable=False, server_default=AppointmentStatus.PENDING.value),
    )
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False, default=utc_now))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False, default=utc_now))


class AppointmentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    servico_id: str | None = PydanticField(default=None, alias="servicoId")
    servico: str | None = None
    preco: float | None = PydanticField(default=None, ge=0)
    data: date
    hora: str = PydanticField(pattern=HHMM_PATTERN)
    # Left out: taken from the service catalog.
    duracao_minutos: int | None = PydanticField(default=None, gt=0, alias="duracaoMinutos")
    nome: str = PydanticField(min_length=3)
    telefone: str = PydanticField(pattern=PHONE_PATTERN)
    email: str | None = PydanticField(default=None, pattern=EMAIL_PATTERN)
    observacoes: str | None = None


class AppointmentUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    servico_id: str | None = PydanticField(default=None, alias="servicoId")
    servico: str | None = None
    preco: float | None = PydanticField(default=None, ge=0)
    data: date | None = None
    hora: str | None = PydanticField(default=None, pattern=HHMM_PATTERN)
    duracao_minutos: int | None = PydanticField(default=None, gt=0, alias="duracaoMinutos")
    nome: str | None = PydanticField(default=None, min_length=3)
    telefone: str | None = PydanticField(default=None, pattern=PHONE_PATTERN)
    email: str | None = PydanticField(default=None, pattern=EMAIL_PATTERN)
    observacoes: str | None = None
    status: AppointmentStatus | None = None


class AppointmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    reference: str | None = None
    servico: str
    servico_id: str | None = PydanticField(default=None, serialization_alias="servicoId")
    preco: float
    data: date
    hora: str
    duracao_minutos: int = PydanticField(serialization_alias="duracaoMinutos")
    nome: str
    telefone: str
    email: str | None = None
    observacoes: str | None = None
    status: AppointmentStatus
    created_at: datetime | None = PydanticField(default=None, serialization_alias="createdAt")
    updated_at: datetime | None = PydanticField(default=None, serialization_alias="updatedAt")
