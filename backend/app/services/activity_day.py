from __future__ import annotations
from datetime import date, datetime, timezone as dt_tz
from zoneinfo import ZoneInfo


def activity_date(now_utc: datetime, tz_name: str = "UTC") -> date:
    """
    Calendar day a submission counts for: the local date of `now_utc` in the
    community timezone. Naive datetimes are taken as UTC.

    Examples:
        >>> from datetime import datetime, timezone
        >>> activity_date(datetime(2025, 1, 10, 3, 0, tzinfo=timezone.utc), "America/New_York")
        datetime.date(2025, 1, 9)
        >>> activity_date(datetime(2025, 1, 10, 3, 0, tzinfo=timezone.utc), "Asia/Tokyo")
        datetime.date(2025, 1, 10)
    """
    if now_utc.tzinfo is None:
        now_utc = now_utc.replace(tzinfo=dt_tz.utc)
    return now_utc.astimezone(ZoneInfo(tz_name)).date()
