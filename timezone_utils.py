"""
Timezone utilities for the EcoPack backend.
Timestamps are stored in UTC; calendar questions such as "is today Monday"
are answered in the configured application timezone (APP_TIMEZONE).
"""

import datetime
import os
import pytz
from typing import Optional, Union

DEFAULT_TIMEZONE = "UTC"


def get_app_timezone(name: Optional[str] = None) -> datetime.tzinfo:
    """
    Resolve the application timezone.

    Args:
        name: IANA timezone name (defaults to the APP_TIMEZONE environment variable)

    Returns:
        A pytz timezone; unknown names fall back to UTC.
    """
    name = name or os.environ.get("APP_TIMEZONE", DEFAULT_TIMEZONE)
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        return pytz.utc


def utc_now() -> datetime.datetime:
    """Current time as an aware UTC datetime."""
    return datetime.datetime.now(pytz.utc)


def ensure_utc(dt: datetime.datetime) -> datetime.datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""
    if dt.tzinfo is None:
        return pytz.utc.localize(dt)
    return dt.astimezone(pytz.utc)


def convert_to_timezone(dt: Union[datetime.datetime, datetime.date],
                        tz: Optional[datetime.tzinfo] = None) -> datetime.datetime:
    """
    Convert a datetime or date to the application timezone.

    Args:
        dt: datetime or date object to convert
        tz: target timezone (defaults to the application timezone)

    Returns:
        datetime.datetime: Converted, timezone-aware datetime
    """
    tz = tz or get_app_timezone()
    if isinstance(dt, datetime.date) and not isinstance(dt, datetime.datetime):
        dt = datetime.datetime.combine(dt, datetime.time.min)
    return ensure_utc(dt).astimezone(tz)


def is_monday(dt: datetime.datetime, tz: Optional[datetime.tzinfo] = None) -> bool:
    # Monday is day 0 in Python weekday (0=Monday, 6=Sunday)
    return convert_to_timezone(dt, tz).weekday() == 0


def same_weekday(dt1: datetime.datetime, dt2: datetime.datetime,
                 tz: Optional[datetime.tzinfo] = None) -> bool:
    """Check if two datetimes fall on the same day of the week in the given timezone."""
    return convert_to_timezone(dt1, tz).weekday() == convert_to_timezone(dt2, tz).weekday()


def to_epoch_millis(dt: datetime.datetime) -> int:
    return int(ensure_utc(dt).timestamp() * 1000)


__all__ = [
    'get_app_timezone',
    'utc_now',
    'ensure_utc',
    'convert_to_timezone',
    'is_monday',
    'same_weekday',
    'to_epoch_millis',
]
