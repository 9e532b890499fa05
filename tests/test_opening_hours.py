"""Test schedule configuration and day schedule resolution."""
import pytest
from pydantic import ValidationError

from conftest import MONDAY, SATURDAY, SUNDAY, THURSDAY, TUESDAY
from podology_backend.opening_hours import (
    REFERENCE_SCHEDULE,
    ScheduleConfig,
    WeekdayOverride,
    get_day_schedule,
)
from podology_backend.settings import Settings


def test_sunday_is_closed():
    assert get_day_schedule("2026-02-15").is_closed is True


def test_thursday_is_closed():
    assert get_day_schedule(THURSDAY).is_closed is True


def test_closed_day_still_has_valid_hours():
    schedule = get_day_schedule(SUNDAY)
    assert (schedule.opening, schedule.last_start, schedule.closing) == ("08:30", "17:30", "18:30")


def test_saturday_opens_later():
    schedule = get_day_schedule("2026-02-14")
    assert schedule.opening == "09:00"
    assert schedule.last_start == "17:30"
    assert schedule.closing == "18:30"
    assert schedule.is_closed is False


def test_tuesday_last_start_is_earlier():
    schedule = get_day_schedule(TUESDAY)
    assert schedule.opening == "08:30"
    assert schedule.last_start == "15:30"
    assert schedule.closing == "18:30"


def test_regular_weekday_uses_defaults():
    schedule = get_day_schedule(MONDAY)
    assert schedule.model_dump() == {
        "opening": "08:30",
        "last_start": "17:30",
        "closing": "18:30",
        "is_closed": False,
    }


def test_alternate_config_is_respected():
    config = ScheduleConfig(closed_weekdays=frozenset({0}), opening_time="10:00")
    assert get_day_schedule(MONDAY, config).is_closed is True
    assert get_day_schedule(SUNDAY, config).is_closed is False
    assert get_day_schedule(SATURDAY, config).opening == "09:00"
    assert get_day_schedule(SUNDAY, config).opening == "10:00"


def test_last_start_must_be_before_closing():
    with pytest.raises(ValidationError):
        ScheduleConfig(last_start_time="18:30")


def test_override_cannot_break_ordering():
    with pytest.raises(ValidationError):
        ScheduleConfig(weekday_overrides={5: WeekdayOverride(opening="18:00")})


def test_rejects_bad_time_and_weekday():
    with pytest.raises(ValidationError):
        ScheduleConfig(opening_time="8h30")
    with pytest.raises(ValidationError):
        ScheduleConfig(closed_weekdays=frozenset({7}))


def test_from_settings_matches_reference():
    assert ScheduleConfig.from_settings(Settings()) == REFERENCE_SCHEDULE


def test_from_settings_picks_up_overrides():
    config = ScheduleConfig.from_settings(
        Settings(
            HYGIENIZATION_MINUTES=10,
            CLOSED_WEEKDAYS=[6],
            WEEKDAY_OVERRIDES={1: WeekdayOverride(last_start="16:00")},
        )
    )
    assert config.hygienization_minutes == 10
    assert get_day_schedule(THURSDAY, config).is_closed is False
    assert get_day_schedule(TUESDAY, config).last_start == "16:00"
    # Replacing the table drops the Saturday override
    assert get_day_schedule(SATURDAY, config).opening == "08:30"


def test_from_settings_accepts_new_weekday_overrides(monkeypatch):
    monkeypatch.setenv(
        "WEEKDAY_OVERRIDES",
        '{"2": {"last_start": "12:00"}, "5": {"opening": "09:00", "last_start": "13:00"}}',
    )
    config = ScheduleConfig.from_settings(Settings())
    wednesday = get_day_schedule(MONDAY.replace(day=18), config)
    assert wednesday.last_start == "12:00"
    saturday = get_day_schedule(SATURDAY, config)
    assert (saturday.opening, saturday.last_start) == ("09:00", "13:00")


def test_day_schedule_serializes_camel_case():
    assert get_day_schedule(TUESDAY).model_dump(by_alias=True) == {
        "opening": "08:30",
        "lastStart": "15:30",
        "closing": "18:30",
        "isClosed": False,
    }
