from __future__ import annotations

from datetime import date, datetime

from loguru import logger
from sqlalchemy.orm import Session

from plan_todos.core.errors import InvalidState, NotFound
from plan_todos.core.periods import check_in_streak, period_key, undo_streak
from plan_todos.core.timeutil import as_utc, local_date, now_utc
from plan_todos.db.models import Circulation
from plan_todos.db.repositories.circulations_repo import (
    add_log,
    delete_log,
    get_circulation,
    latest_log,
    log_timestamps_desc,
    previous_log,
)

ALREADY_CHECKED_IN = "Already checked in today"
NO_HISTORY = "No check-in history found"


def _load(session: Session, circulation_id: str) -> Circulation:
    circulation = get_circulation(session, circulation_id)
    if circulation is None:
        raise NotFound("circulation", circulation_id)
    return circulation


def _log_days_desc(session: Session, circulation_id: str) -> list[date]:
    return [local_date(ts) for ts in log_timestamps_desc(session, circulation_id)]


def check_in(
    session: Session,
    circulation_id: str,
    note: str | None = None,
    *,
    now: datetime | None = None,
) -> Circulation:
    """
    Record one completion of a circulation.
    - count: current_count + 1, no same-day restriction
    - periodic: rejected when the last completion falls on today's local date;
      otherwise streak is recomputed from history and best_streak raised
    Exactly one log row is appended.
    """
    circulation = _load(session, circulation_id)
    now = as_utc(now or now_utc())
    today = local_date(now)

    if circulation.kind == "count":
        circulation.current_count += 1
        period = None
    else:
        frequency = circulation.frequency or "daily"
        period = period_key(frequency, today)
        if circulation.last_completed_at is not None and local_date(circulation.last_completed_at) == today:
            raise InvalidState(ALREADY_CHECKED_IN)

        new_streak = check_in_streak(frequency, _log_days_desc(session, circulation.id), today)
        circulation.streak_count = new_streak
        if new_streak > circulation.best_streak:
            circulation.best_streak = new_streak

    circulation.last_completed_at = now
    circulation.updated_at = now
    add_log(session, circulation.id, completed_at=now, note=note, period=period)
    logger.info(
        "circulation check_in id={} kind={} period={} count={} streak={} best={}",
        circulation.id,
        circulation.kind,
        period,
        circulation.current_count,
        circulation.streak_count,
        circulation.best_streak,
    )
    return circulation


def undo_check_in(
    session: Session,
    circulation_id: str,
    *,
    now: datetime | None = None,
) -> Circulation:
    """Remove the most recent check-in and reverse its effect on counters."""
    circulation = _load(session, circulation_id)
    last = latest_log(session, circulation.id)
    if last is None:
        raise InvalidState(NO_HISTORY)

    now = as_utc(now or now_utc())
    if circulation.kind == "count":
        circulation.current_count = max(circulation.current_count - 1, 0)
    else:
        # best_streak is never lowered here.
        circulation.streak_count = undo_streak(
            circulation.frequency or "daily",
            _log_days_desc(session, circulation.id),
            local_date(now),
        )

    prior = previous_log(session, circulation.id, exclude_id=last.id)
    circulation.last_completed_at = prior.completed_at if prior is not None else None
    circulation.updated_at = now
    delete_log(session, last)
    logger.info(
        "circulation undo_check_in id={} kind={} removed_log={} count={} streak={}",
        circulation.id,
        circulation.kind,
        last.id,
        circulation.current_count,
        circulation.streak_count,
    )
    return circulation
