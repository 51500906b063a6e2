from datetime import date, datetime, timedelta

import pytz

from kestrel.services.expiry import CredentialStatus, days_until, resolve_status


NOW = datetime(2025, 6, 1, 12, 0, 0)


def test_no_expiry_is_valid():
    assert resolve_status(None, NOW) == CredentialStatus.VALID


def test_exactly_thirty_days_is_expiring():
    assert resolve_status(NOW + timedelta(days=30), NOW) == CredentialStatus.EXPIRING


def test_just_over_thirty_days_is_valid():
    # 30 days and one second rounds up to 31 days
    assert resolve_status(NOW + timedelta(days=30, seconds=1), NOW) == CredentialStatus.VALID


def test_within_window_is_expiring():
    assert resolve_status(NOW + timedelta(days=10), NOW) == CredentialStatus.EXPIRING


def test_expiry_at_now_is_expiring():
    assert resolve_status(NOW, NOW) == CredentialStatus.EXPIRING


def test_past_expiry_is_expired():
    assert resolve_status(NOW - timedelta(days=1), NOW) == CredentialStatus.EXPIRED


def test_expired_one_second_ago():
    assert resolve_status(NOW - timedelta(seconds=1), NOW) == CredentialStatus.EXPIRED


def test_aware_and_naive_agree():
    perth = pytz.timezone("Australia/Perth")
    # 20:00 Perth == 12:00 UTC
    aware_now = perth.localize(datetime(2025, 6, 1, 20, 0, 0))
    expiry = NOW + timedelta(days=45)
    assert resolve_status(expiry, aware_now) == resolve_status(expiry, NOW) == CredentialStatus.VALID
    assert resolve_status(NOW - timedelta(minutes=5), aware_now) == CredentialStatus.EXPIRED


def test_date_values_are_utc_midnight():
    assert resolve_status(date(2025, 6, 1), NOW) == CredentialStatus.EXPIRED
    assert resolve_status(date(2025, 6, 2), NOW) == CredentialStatus.EXPIRING
    assert resolve_status(date(2025, 8, 1), NOW) == CredentialStatus.VALID


def test_custom_window():
    expiry = NOW + timedelta(days=10)
    assert resolve_status(expiry, NOW, window_days=7) == CredentialStatus.VALID
    assert resolve_status(expiry, NOW, window_days=10) == CredentialStatus.EXPIRING


def test_days_until_rounds_partial_days_up():
    assert days_until(NOW + timedelta(hours=1), NOW) == 1
    assert days_until(NOW + timedelta(days=2), NOW) == 2
    assert days_until(NOW - timedelta(hours=1), NOW) == 0
