"""Tests for the UTC time helpers."""

from datetime import datetime, timedelta, timezone

from civicsim.clock import as_naive_utc, utcnow


def test_utcnow_is_naive_utc():
    now = utcnow()

    assert now.tzinfo is None
    assert abs(datetime.now(timezone.utc).replace(tzinfo=None) - now) < timedelta(seconds=5)


def test_aware_value_converted_to_utc():
    kigali = timezone(timedelta(hours=2))

    assert as_naive_utc(datetime(2024, 1, 1, 14, 0, tzinfo=kigali)) == datetime(2024, 1, 1, 12, 0)


def test_naive_value_unchanged():
    value = datetime(2024, 1, 1, 12, 0)

    assert as_naive_utc(value) is value
