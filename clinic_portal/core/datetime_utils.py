"""
UTC-first datetime utilities.

- All datetimes are processed in UTC
- Database storage: ISO 8601 strings with 'Z' suffix (SQLite stores TEXT)
- Incoming strings in any ISO 8601 form are normalized to UTC

Usage:
    from core.datetime_utils import utc_now, parse_datetime, format_iso, now_iso

    now = utc_now()
    dt = parse_datetime("2024-01-15T10:30:00+05:30")  # Converts to UTC
    iso_str = format_iso(dt)  # "2024-01-15T05:00:00.000Z"
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)


# =============================================================================
# CORE UTILITIES
# =============================================================================

def utc_now() -> datetime:
    """Get current datetime in UTC with timezone info."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If datetime is naive (no timezone), assumes it's already UTC
    - If datetime has timezone, converts to UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# =============================================================================
# PARSING
# =============================================================================

def parse_datetime(value: Union[str, datetime]) -> datetime:
    """
    Parse a datetime value to UTC datetime.

    Accepts a datetime, an ISO 8601 string (with or without timezone, 'Z'
    suffix allowed) or a plain YYYY-MM-DD date.

    Raises:
        ValueError: If the value cannot be parsed.

    Examples:
        >>> parse_datetime("2024-01-15T10:30:00Z")
        datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, datetime):
        return to_utc(value)

    if not isinstance(value, str):
        raise ValueError(f"Expected datetime or string, got {type(value).__name__}")

    value = value.strip()

    try:
        if value.endswith('Z'):
            value = value[:-1] + '+00:00'
        return to_utc(datetime.fromisoformat(value))
    except ValueError:
        pass

    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d", "%m/%d/%Y"):
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    raise ValueError(f"Cannot parse datetime: '{value}'")


def parse_datetime_safe(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse datetime, returning None for None or unparseable input."""
    if value is None or value == "":
        return None
    try:
        return parse_datetime(value)
    except ValueError as e:
        logger.warning(f"Failed to parse datetime '{value}': {e}")
        return None


# =============================================================================
# FORMATTING
# =============================================================================

def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string with UTC 'Z' suffix.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00.000Z'
    """
    dt = to_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond // 1000:03d}Z"


def now_iso() -> str:
    """Current UTC time formatted for storage."""
    return format_iso(utc_now())


# =============================================================================
# ARITHMETIC
# =============================================================================

def add_days(dt: datetime, days: int) -> datetime:
    """Return dt shifted by a number of days."""
    return to_utc(dt) + timedelta(days=days)


def hours_since(value: Union[str, datetime, None], now: Optional[datetime] = None) -> Optional[float]:
    """Hours elapsed since a stored timestamp, or None if it cannot be parsed."""
    dt = parse_datetime_safe(value)
    if dt is None:
        return None
    now = now or utc_now()
    return (to_utc(now) - dt).total_seconds() / 3600


def month_bounds(dt: datetime) -> Tuple[datetime, datetime]:
    """Return [start, end) of the UTC calendar month containing dt."""
    dt = to_utc(dt)
    start = dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def previous_month_bounds(dt: datetime) -> Tuple[datetime, datetime]:
    """Return [start, end) of the UTC calendar month before the one containing dt."""
    this_start, _ = month_bounds(dt)
    return month_bounds(this_start - timedelta(days=1))
