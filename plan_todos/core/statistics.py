"""
Read-only completion statistics over the whole store.

Rates are percentages rounded to one decimal; an empty table has rate 0.0.
The trend covers the last ``TREND_DAYS`` local days, oldest first, with
zero-filled days.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from plan_todos.core.productivity import productivity_summary
from plan_todos.core.timeutil import as_utc, local_date, local_day_start, now_utc
from plan_todos.db.models import Milestone, Step, Task, Todo
from plan_todos.db.repositories.stats_repo import done_and_total, entity_counts
from plan_todos.db.repositories.todos_repo import completion_timestamps_since

TREND_DAYS = 7


def completion_rate(done: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(done * 100 / total, 1)


def completion_stats(session: Session) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, model in (("todo", Todo), ("task", Task), ("step", Step), ("milestone", Milestone)):
        done, total = done_and_total(session, model)
        out[name] = {"done": done, "total": total, "rate": completion_rate(done, total)}
    return out


def daily_completions(stamps: list[datetime], today: date, *, days: int = TREND_DAYS) -> list[dict[str, Any]]:
    first = today - timedelta(days=days - 1)
    buckets = {first + timedelta(days=n): 0 for n in range(days)}
    for ts in stamps:
        day = local_date(ts)
        if day in buckets:
            buckets[day] += 1
    return [{"date": day.isoformat(), "completed": count} for day, count in buckets.items()]


def trend_stats(session: Session, *, now: datetime | None = None) -> list[dict[str, Any]]:
    today = local_date(as_utc(now or now_utc()))
    since = local_day_start(today - timedelta(days=TREND_DAYS - 1))
    return daily_completions(completion_timestamps_since(session, since), today)


def build_statistics(session: Session, *, now: datetime | None = None) -> dict[str, Any]:
    return {
        "counts": entity_counts(session),
        "completion": completion_stats(session),
        "trends": trend_stats(session, now=now),
        "efficiency": productivity_summary(session, now=now).to_dict(),
    }
