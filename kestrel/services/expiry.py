"""
Credential expiry status.

A credential's lifecycle status is never trusted from storage: it is a pure
function of its expiry instant and the current instant, recomputed on every
read. The same function seeds the stored default at creation time.
"""
import math
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Union

import pytz

from ..config import settings


class CredentialStatus(str, Enum):
    VALID = "VALID"
    EXPIRING = "EXPIRING"
    EXPIRED = "EXPIRED"


ONE_DAY_SECONDS = timedelta(days=1).total_seconds()


def _as_utc(value: Union[date, datetime]) -> datetime:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=pytz.UTC)
    return value.astimezone(pytz.UTC)


def days_until(expiry: Union[date, datetime], now: datetime) -> int:
    """Whole days until ``expiry``, rounded up (a partial day counts as a day)."""
    delta = (_as_utc(expiry) - _as_utc(now)).total_seconds()
    return math.ceil(delta / ONE_DAY_SECONDS)


def resolve_status(
    expiry: Optional[Union[date, datetime]],
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
) -> CredentialStatus:
    """
    Compute the lifecycle status of a credential.

    Args:
        expiry: Expiry instant; naive values are UTC. ``None`` means the
            credential never expires.
        now: Reference instant (defaults to the current UTC time)
        window_days: Days before expiry that count as EXPIRING
            (defaults to EXPIRING_WINDOW_DAYS)

    Returns:
        VALID, EXPIRING or EXPIRED
    """
    if expiry is None:
        return CredentialStatus.VALID
    if now is None:
        now = datetime.now(pytz.UTC)
    if window_days is None:
        window_days = settings.expiring_window_days

    # An instant already passed is expired even when less than a day ago,
    # where ceiling division alone would still yield 0.
    if _as_utc(expiry) < _as_utc(now):
        return CredentialStatus.EXPIRED
    if days_until(expiry, now) <= window_days:
        return CredentialStatus.EXPIRING
    return CredentialStatus.VALID
