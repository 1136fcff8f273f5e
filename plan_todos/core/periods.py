"""
Calendar bucketing and streak arithmetic for recurring circulations.

All inputs are local calendar dates; the caller converts stored timestamps.
Weekly and monthly streak walks recognise the preceding period through
day-count windows (14 and 45 days), not exact calendar subtraction.
"""
from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Sequence

WEEKLY_WINDOW_DAYS = 14
MONTHLY_WINDOW_DAYS = 45


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, raw: str | None) -> Frequency:
        value = (raw or "").strip().lower()
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid frequency: {raw!r}. Use 'daily', 'weekly' or 'monthly'") from None


def week_key(day: date) -> str:
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year:04d}-W{iso_week:02d}"


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def period_key(frequency: Frequency | str | None, day: date) -> str:
    freq = frequency.value if isinstance(frequency, Frequency) else (frequency or "daily")
    if freq == Frequency.WEEKLY.value:
        return week_key(day)
    if freq == Frequency.MONTHLY.value:
        return month_key(day)
    return day.isoformat()


def _daily_streak(days_desc: Sequence[date], today: date) -> int:
    streak = 1
    cursor = today
    for day in days_desc:
        expected = cursor - timedelta(days=1)
        if day == expected:
            streak += 1
            cursor = day
        elif day < expected:
            break
    return streak


def _weekly_streak(days_desc: Sequence[date], today: date) -> int:
    streak = 1
    cursor_week = week_key(today)
    for day in days_desc:
        week = week_key(day)
        if week == cursor_week:
            continue
        diff_days = (today - day).days
        if 0 < diff_days < WEEKLY_WINDOW_DAYS:
            streak += 1
            cursor_week = week
    return streak


def _monthly_streak(days_desc: Sequence[date], today: date) -> int:
    streak = 1
    cursor_month = today.replace(day=1)
    for day in days_desc:
        month = day.replace(day=1)
        if month == cursor_month:
            continue
        diff_days = (cursor_month - month).days
        if 0 < diff_days < MONTHLY_WINDOW_DAYS:
            streak += 1
            cursor_month = month
    return streak


def check_in_streak(frequency: Frequency | str | None, days_desc: Sequence[date], today: date) -> int:
    """
    Streak after a check-in on ``today``, given the dates of earlier check-ins
    newest first. The new check-in itself counts as one.
    """
    if not days_desc:
        return 1
    freq = frequency.value if isinstance(frequency, Frequency) else (frequency or "daily")
    if freq == Frequency.DAILY.value:
        return _daily_streak(days_desc, today)
    if freq == Frequency.WEEKLY.value:
        return _weekly_streak(days_desc, today)
    if freq == Frequency.MONTHLY.value:
        return _monthly_streak(days_desc, today)
    return 1


def undo_streak(frequency: Frequency | str | None, days_desc: Sequence[date], today: date) -> int:
    """
    Streak to restore when the most recent check-in is removed.

    ``days_desc`` still contains the check-in being removed. For daily
    circulations only check-ins strictly before ``today`` count, and the chain
    has to start at ``today - 1``. Weekly and monthly circulations fall back to 1.
    """
    if not days_desc:
        return 0
    freq = frequency.value if isinstance(frequency, Frequency) else (frequency or "daily")
    if freq != Frequency.DAILY.value:
        return 1

    streak = 0
    cursor = today
    for day in days_desc:
        expected = cursor - timedelta(days=1)
        if day == expected:
            streak += 1
            cursor = day
        elif day < expected:
            break
    return streak
