from __future__ import annotations

from datetime import datetime

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from plan_todos.core.periods import Frequency
from plan_todos.db.models import Circulation, CirculationLog

CIRCULATION_KINDS = {"periodic", "count"}


def create_circulation(
    session: Session,
    *,
    title: str,
    kind: str,
    frequency: str | None = None,
    target_count: int | None = None,
    content: str | None = None,
) -> Circulation:
    if not title.strip():
        raise ValueError("Title cannot be empty")
    if kind not in CIRCULATION_KINDS:
        raise ValueError("Invalid circulation kind. Use 'periodic' or 'count'")
    if kind == "periodic":
        if frequency is None:
            raise ValueError("frequency is required for periodic circulation")
        frequency = Frequency.parse(frequency).value

    circulation = Circulation(
        title=title,
        content=content,
        kind=kind,
        frequency=frequency,
        target_count=target_count,
        current_count=0,
        streak_count=0,
        best_streak=0,
        last_completed_at=None,
        status="active",
    )
    session.add(circulation)
    session.flush()
    return circulation


def get_circulation(session: Session, circulation_id: str) -> Circulation | None:
    return session.get(Circulation, circulation_id)


def list_circulations(
    session: Session,
    *,
    kind: str | None = None,
    frequency: str | None = None,
) -> list[Circulation]:
    stmt = select(Circulation)
    if kind is not None:
        stmt = stmt.where(Circulation.kind == kind, Circulation.status == "active")
        if frequency is not None:
            stmt = stmt.where(Circulation.frequency == frequency)
    return list(session.scalars(stmt.order_by(desc(Circulation.created_at))).all())


def list_logs(session: Session, circulation_id: str, *, limit: int | None = 20) -> list[CirculationLog]:
    stmt = (
        select(CirculationLog)
        .where(CirculationLog.circulation_id == circulation_id)
        .order_by(desc(CirculationLog.completed_at))
    )
    if limit is not None:
        stmt = stmt.limit(int(limit))
    return list(session.scalars(stmt).all())


def log_timestamps_desc(session: Session, circulation_id: str) -> list[datetime]:
    return list(
        session.scalars(
            select(CirculationLog.completed_at)
            .where(CirculationLog.circulation_id == circulation_id)
            .order_by(desc(CirculationLog.completed_at))
        ).all()
    )


def latest_log(session: Session, circulation_id: str) -> CirculationLog | None:
    return session.scalar(
        select(CirculationLog)
        .where(CirculationLog.circulation_id == circulation_id)
        .order_by(desc(CirculationLog.completed_at))
        .limit(1)
    )


def previous_log(session: Session, circulation_id: str, *, exclude_id: str) -> CirculationLog | None:
    return session.scalar(
        select(CirculationLog)
        .where(CirculationLog.circulation_id == circulation_id, CirculationLog.id != exclude_id)
        .order_by(desc(CirculationLog.completed_at))
        .limit(1)
    )


def add_log(
    session: Session,
    circulation_id: str,
    *,
    completed_at: datetime,
    note: str | None = None,
    period: str | None = None,
) -> CirculationLog:
    log = CirculationLog(
        circulation_id=circulation_id,
        completed_at=completed_at,
        note=note,
        period=period,
    )
    session.add(log)
    session.flush()
    return log


def delete_log(session: Session, log: CirculationLog) -> None:
    session.delete(log)
    session.flush()
