from __future__ import annotations
from datetime import date, datetime, timezone
from app.services.activity_day import activity_date


def test_utc_default():
    assert activity_date(datetime(2025, 1, 10, 23, 59, tzinfo=timezone.utc)) == date(2025, 1, 10)


def test_local_day_differs_from_utc_day():
    now = datetime(2025, 1, 10, 3, 0, tzinfo=timezone.utc)
    assert activity_date(now, "America/Los_Angeles") == date(2025, 1, 9)
    assert activity_date(now, "Asia/Kolkata") == date(2025, 1, 10)


def test_naive_datetime_is_utc():
    assert activity_date(datetime(2025, 1, 10, 3, 0), "America/New_York") == date(2025, 1, 9)
