"""
Time utilities for twoleg.

Execution timestamps (cooldown, swap deadlines) are POSIX seconds as floats,
the unit the engine clock returns. Helpers here convert them for display.
"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional

import pytz

from twoleg.core.config import get_settings

Clock = Callable[[], float]

# Default engine clock
system_clock: Clock = time.time


def get_timezone() -> pytz.BaseTzInfo:
    """Get configured display timezone."""
    settings = get_settings()
    return pytz.timezone(settings.timezone)


def now_utc() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def from_epoch(ts: float) -> datetime:
    """POSIX seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def to_local(dt: datetime) -> datetime:
    """Convert datetime to configured timezone."""
    tz = get_timezone()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def format_timestamp(dt: Optional[datetime] = None, fmt: str = "iso") -> str:
    """
    Format datetime to string.

    Args:
        dt: Datetime to format. Uses current UTC time if not provided.
        fmt: Format type - 'iso', 'display', 'date', 'time'

    Returns:
        Formatted string
    """
    if dt is None:
        dt = now_utc()

    formats = {
        "iso": "%Y-%m-%dT%H:%M:%SZ",
        "display": "%Y-%m-%d %H:%M:%S",
        "date": "%Y-%m-%d",
        "time": "%H:%M:%S",
    }

    return dt.strftime(formats.get(fmt, fmt))


def format_epoch(ts: float, fmt: str = "display") -> str:
    """Format POSIX seconds in the configured timezone; 0 means never."""
    if ts <= 0:
        return "never"
    return format_timestamp(to_local(from_epoch(ts)), fmt)
