import re
from datetime import date, timedelta

from podology_backend.service_catalog import get_service_by_id

DEFAULT_DURATION_MINUTES = 60

_HOURS_RE = re.compile(r"(\d+)\s*h", re.IGNORECASE)
_MINUTES_RE = re.compile(r"(\d+)\s*m", re.IGNORECASE)


# --------- TIME ARITHMETIC ---------
def time_to_minutes(value: str) -> int:
    """Convert 'HH:MM' → minutes since midnight.

    Empty or malformed input (no ':') gives 0 instead of raising. A trailing
    ':SS' part, as Postgres renders time columns, is ignored.
    """
    if not value or ":" not in value:
        return 0
    parts = value.split(":")
    return _to_int(parts[0]) * 60 + _to_int(parts[1])


def _to_int(part: str) -> int:
    try:
        return int(part)
    except ValueError:
        return 0


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight → zero-padded 'HH:MM'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date(value) -> date:
    """Read a 'YYYY-MM-DD' string as a plain calendar date (no timezone)."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def month_key(day) -> str:
    """'YYYY-MM' of a date, the key month-level booking settings use."""
    return parse_date(day).strftime("%Y-%m")


def month_bounds(month: str) -> tuple[date, date]:
    """First and last day of a 'YYYY-MM' month. Raises ValueError if invalid."""
    first = date.fromisoformat(f"{month}-01")
    last = (first + timedelta(days=32)).replace(day=1) - timedelta(days=1)
    return first, last


# --------- DURATIONS ---------
def parse_duration(duration_str: str | None) -> int:
    """Convert '1h20m' / '20min' / '2h' → total minutes.

    Hours and minutes are matched independently, so '1h 20 m' and '1H20M'
    parse too. Missing or unparseable text falls back to 60, never 0.
    """
    if not duration_str:
        return DEFAULT_DURATION_MINUTES

    total = 0
    hours = _HOURS_RE.search(duration_str)
    if hours:
        total += int(hours.group(1)) * 60
    minutes = _MINUTES_RE.search(duration_str)
    if minutes:
        total += int(minutes.group(1))
    return total or DEFAULT_DURATION_MINUTES


def resolve_duration(value) -> int:
    """Turn a catalog duration (int minutes or duration text) into minutes."""
    if isinstance(value, bool):
        return DEFAULT_DURATION_MINUTES
    if isinstance(value, int):
        return value if value > 0 else DEFAULT_DURATION_MINUTES
    if isinstance(value, str):
        return parse_duration(value)
    return DEFAULT_DURATION_MINUTES


def get_service_duration(service_id: str) -> int:
    """Look up a service duration from the catalog. Default to 60 if not found."""
    service = get_service_by_id(service_id)
    if service is None:
        return DEFAULT_DURATION_MINUTES
    return resolve_duration(service["duration"])
