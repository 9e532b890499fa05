"""
opening_hours.py
Opening-hours configuration and the per-day schedule resolver.

Weekdays follow Python's date.weekday(): Monday=0 ... Sunday=6.
"""

import re
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from podology_backend.utils import DEFAULT_DURATION_MINUTES, parse_date, time_to_minutes

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_hhmm(value: str | None) -> str | None:
    if value is not None and not _HHMM_RE.match(value):
        raise ValueError(f"'{value}' is not a valid HH:MM time")
    return value


class WeekdayOverride(BaseModel):
    """Replaces the opening and/or last-start time on one weekday.

    Closing time is shared by every day and cannot be overridden.
    """
    model_config = ConfigDict(frozen=True)

    opening: str | None = None
    last_start: str | None = None

    @field_validator("opening", "last_start")
    @classmethod
    def valid_times(cls, value: str | None) -> str | None:
        return _check_hhmm(value)


class DaySchedule(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    opening: str
    last_start: str = Field(serialization_alias="lastStart")
    closing: str
    is_closed: bool = Field(serialization_alias="isClosed")


def reference_weekday_overrides() -> dict[int, WeekdayOverride]:
    """Saturday opens at 09:00; Tuesday takes its last booking at 15:30."""
    return {
        SATURDAY: WeekdayOverride(opening="09:00"),
        TUESDAY: WeekdayOverride(last_start="15:30"),
    }


class ScheduleConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    opening_time: str = "08:30"
    last_start_time: str = "17:30"
    closing_time: str = "18:30"
    weekday_overrides: dict[int, WeekdayOverride] = Field(default_factory=reference_weekday_overrides)
    closed_weekdays: frozenset[int] = frozenset({SUNDAY, THURSDAY})
    hygienization_minutes: int = Field(default=0, ge=0)
    slot_interval: int = Field(default=30, gt=0)
    default_duration_minutes: int = Field(default=DEFAULT_DURATION_MINUTES, gt=0)

    @field_validator("opening_time", "last_start_time", "closing_time")
    @classmethod
    def valid_times(cls, value: str) -> str:
        return _check_hhmm(value)

    @field_validator("weekday_overrides", "closed_weekdays")
    @classmethod
    def known_weekdays(cls, weekdays):
        for weekday in weekdays:
            if not 0 <= weekday <= 6:
                raise ValueError(f"weekday {weekday} out of range 0-6")
        return weekdays

    @model_validator(mode="after")
    def ordered_bounds(self):
        closing = time_to_minutes(self.closing_time)
        for weekday in range(7):
            opening, last_start = self.bounds_for(weekday)
            if not time_to_minutes(opening) <= time_to_minutes(last_start) < closing:
                raise ValueError(
                    f"weekday {weekday}: expected opening <= last start < closing, "
                    f"got {opening} / {last_start} / {self.closing_time}"
                )
        return self

    def bounds_for(self, weekday: int) -> tuple[str, str]:
        opening = self.opening_time
        last_start = self.last_start_time
        override = self.weekday_overrides.get(weekday)
        if override is not None:
            opening = override.opening or opening
            last_start = override.last_start or last_start
        return opening, last_start

    @classmethod
    def from_settings(cls, settings) -> "ScheduleConfig":
        """Build the configuration from environment-backed Settings."""
        return cls(
            opening_time=settings.OPENING_TIME,
            last_start_time=settings.LAST_START_TIME,
            closing_time=settings.CLOSING_TIME,
            weekday_overrides=settings.WEEKDAY_OVERRIDES,
            closed_weekdays=frozenset(settings.CLOSED_WEEKDAYS),
            hygienization_minutes=settings.HYGIENIZATION_MINUTES,
            slot_interval=settings.SLOT_INTERVAL_MINUTES,
            default_duration_minutes=settings.DEFAULT_DURATION_MINUTES,
        )


REFERENCE_SCHEDULE = ScheduleConfig()


def get_day_schedule(day: date | str, config: ScheduleConfig = REFERENCE_SCHEDULE) -> DaySchedule:
    """Return the opening, last-start and closing times that apply on `day`.

    Closed days still get a valid triple; check `is_closed` before offering
    any slot.
    """
    weekday = parse_date(day).weekday()
    opening, last_start = config.bounds_for(weekday)
    return DaySchedule(
        opening=opening,
        last_start=last_start,
        closing=config.closing_time,
        is_closed=weekday in config.closed_weekdays,
    )
