from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Sequence

from sqlalchemy.orm import Session

from plan_todos.config import settings
from plan_todos.core.timeutil import as_utc, local_date, local_day_start, now_utc
from plan_todos.db.repositories.todos_repo import (
    completion_rate_counts,
    completion_timestamps_since,
    count_completed_since,
)


@dataclass(slots=True)
class ProductivitySummary:
    streak: int
    score: int
    today_completed: int
    week_completed: int
    month_completed: int

    def to_dict(self) -> dict:
        return asdict(self)


def completion_streak(days_desc: Sequence[date], today: date) -> int:
    """Consecutive days with a completion, ending today or yesterday."""
    days = set(days_desc)
    yesterday = today - timedelta(days=1)
    if today in days:
        cursor = today
    elif yesterday in days:
        cursor = yesterday
    else:
        return 0

    streak = 0
    for day in sorted(days, reverse=True):
        if day > cursor:
            continue
        if day != cursor:
            break
        streak += 1
        cursor = cursor - timedelta(days=1)
    return streak


def productivity_score(completed: int, total: int, streak: int) -> int:
    completion_rate = completed / total if total > 0 else 0.0
    raw = completion_rate * 100 * settings.completion_weight + min(streak, settings.streak_cap) * settings.streak_points
    return int(math.floor(min(100.0, raw) + 0.5))


def completion_days_desc(session: Session, today: date, *, window_days: int) -> list[date]:
    since = local_day_start(today - timedelta(days=window_days))
    days = {local_date(ts) for ts in completion_timestamps_since(session, since)}
    return sorted(days, reverse=True)


def productivity_summary(session: Session, *, now: datetime | None = None) -> ProductivitySummary:
    now = as_utc(now or now_utc())
    today = local_date(now)

    days = completion_days_desc(session, today, window_days=settings.streak_window_days)
    streak = completion_streak(days, today)

    rate_since = local_day_start(today - timedelta(days=settings.completion_window_days))
    completed, total = completion_rate_counts(session, rate_since)

    return ProductivitySummary(
        streak=streak,
        score=productivity_score(completed, total, streak),
        today_completed=count_completed_since(session, local_day_start(today)),
        week_completed=count_completed_since(session, rate_since),
        month_completed=count_completed_since(
            session, local_day_start(today - timedelta(days=settings.streak_window_days))
        ),
    )
