from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from plan_todos.config import settings


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date(value: datetime) -> date:
    return as_utc(value).astimezone(local_tz()).date()


def local_day_start(day: date) -> datetime:
    """Start of a local calendar day, expressed in UTC."""
    return datetime.combine(day, time.min, tzinfo=local_tz()).astimezone(timezone.utc)
