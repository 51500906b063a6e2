"""
Timezone helpers.
Timestamps are stored as naive UTC; day boundaries follow the site's local time.
"""
from datetime import datetime
from typing import Optional
import pytz
from ..config import settings


def utc_now() -> datetime:
    """Current instant as naive UTC, the form stored in the database."""
    return datetime.utcnow().replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """
    Normalise a datetime to naive UTC.

    Args:
        value: Naive (assumed UTC) or timezone-aware datetime

    Returns:
        Naive UTC datetime
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(pytz.UTC).replace(tzinfo=None)


def utc_to_local(utc_datetime: datetime, timezone_str: str) -> datetime:
    """
    Convert UTC datetime to local timezone.

    Args:
        utc_datetime: UTC datetime (naive or timezone-aware)
        timezone_str: Timezone string (e.g., "Australia/Perth")

    Returns:
        Local datetime (timezone-aware)
    """
    tz = pytz.timezone(timezone_str)
    if utc_datetime.tzinfo is None:
        utc_dt = utc_datetime.replace(tzinfo=pytz.UTC)
    else:
        utc_dt = utc_datetime.astimezone(pytz.UTC)
    return utc_dt.astimezone(tz)


def start_of_local_day(now: Optional[datetime] = None, timezone_str: Optional[str] = None) -> datetime:
    """
    Local midnight of the day containing ``now``, returned as naive UTC.

    Args:
        now: Reference instant (naive UTC or aware); defaults to the current time
        timezone_str: Timezone whose calendar day is used (default from settings)
    """
    if now is None:
        now = utc_now()
    if timezone_str is None:
        timezone_str = settings.tz_default

    tz = pytz.timezone(timezone_str)
    local = utc_to_local(now, timezone_str)
    midnight = tz.localize(datetime(local.year, local.month, local.day))
    return midnight.astimezone(pytz.UTC).replace(tzinfo=None)
