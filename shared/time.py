from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional, Union

# --- Internal override for testing ---
_current_time_override: Optional[datetime] = None

Clock = Callable[[], datetime]

# === Time Access ===

def utcnow() -> datetime:
    return _current_time_override or datetime.now(timezone.utc)


def set_fake_utcnow(fake_time: datetime) -> None:
    global _current_time_override
    _current_time_override = fake_time


def clear_fake_utcnow() -> None:
    global _current_time_override
    _current_time_override = None

# === Time Parsing ===

def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string. Supports trailing 'Z'. Returns a datetime; no timezone normalization here."""
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)


def is_date_only(value: str) -> bool:
    """True for a bare calendar date such as '2025-07-11'."""
    try:
        date.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def ensure_aware_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc(value: Union[str, datetime, date]) -> datetime:
    """Accept an ISO string, a datetime or a bare date; naive values are read as UTC."""
    if isinstance(value, str):
        value = parse_datetime(value)
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return ensure_aware_utc(value)

# === Time Checks ===

def is_past(dt: datetime, now: Optional[datetime] = None) -> bool:
    return ensure_aware_utc(dt) < (now or utcnow())


def days_until(dt: datetime, now: Optional[datetime] = None) -> int:
    """Whole days from now until dt, floored (an event 10.5 days away is 10 days away)."""
    delta = ensure_aware_utc(dt) - (now or utcnow())
    return delta // ONE_DAY


def date_key(dt: datetime) -> str:
    """YYYY-MM-DD of dt in UTC, the format blackout dates are stored in."""
    return ensure_aware_utc(dt).date().isoformat()

# === Constants ===

ONE_DAY = timedelta(days=1)
