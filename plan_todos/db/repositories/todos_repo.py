from __future__ import annotations

from datetime import date, datetime, timedelta

from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session

from plan_todos.core.timeutil import as_utc, now_utc
from plan_todos.db.models import Todo

TODO_STATUSES = {"pending", "in-progress", "done"}
OPEN_STATUSES = ("pending", "in-progress")


def create_todo(
    session: Session,
    *,
    title: str,
    content: str | None = None,
    due_date: str | None = None,
    status: str = "pending",
    priority: str = "P2",
    now: datetime | None = None,
) -> Todo:
    if not title.strip():
        raise ValueError("Title cannot be empty")
    if status not in TODO_STATUSES:
        raise ValueError(f"Invalid todo status: {status}")
    ts = as_utc(now or now_utc())
    todo = Todo(
        title=title,
        content=content,
        due_date=due_date,
        status=status,
        priority=priority,
        created_at=ts,
        updated_at=ts,
    )
    session.add(todo)
    session.flush()
    return todo


def set_todo_status(session: Session, todo_id: str, status: str, *, now: datetime | None = None) -> Todo:
    todo = session.get(Todo, todo_id)
    if todo is None:
        raise ValueError("Todo not found")
    if status not in TODO_STATUSES:
        raise ValueError(f"Invalid todo status: {status}")
    todo.status = status
    todo.updated_at = as_utc(now or now_utc())
    session.flush()
    return todo


def completion_timestamps_since(session: Session, since: datetime) -> list[datetime]:
    """``updated_at`` of done todos touched at or after ``since`` (UTC), newest first."""
    return list(
        session.scalars(
            select(Todo.updated_at)
            .where(Todo.status == "done", Todo.updated_at >= since)
            .order_by(Todo.updated_at.desc())
        ).all()
    )


def count_completed_since(session: Session, since: datetime) -> int:
    return int(
        session.scalar(select(func.count(Todo.id)).where(Todo.status == "done", Todo.updated_at >= since)) or 0
    )


def completion_rate_counts(session: Session, since: datetime) -> tuple[int, int]:
    """
    Return ``(completed, total)`` over todos that are either done since ``since``
    or still open, whatever their age.
    """
    row = session.execute(
        select(
            func.coalesce(func.sum(case((Todo.status == "done", 1), else_=0)), 0),
            func.count(Todo.id),
        ).where(or_(Todo.updated_at >= since, Todo.status != "done"))
    ).one()
    return int(row[0] or 0), int(row[1] or 0)


def _due_day():
    # due_date is free text starting with YYYY-MM-DD
    return func.date(Todo.due_date)


def list_due_open_todos(session: Session, today: date) -> list[Todo]:
    """Open todos due today or earlier."""
    return list(
        session.scalars(
            select(Todo)
            .where(Todo.status.in_(OPEN_STATUSES), _due_day() <= today.isoformat())
            .order_by(Todo.due_date)
        ).all()
    )


def list_overdue_todos(session: Session, today: date) -> list[Todo]:
    return list(
        session.scalars(
            select(Todo)
            .where(Todo.status != "done", _due_day() < today.isoformat())
            .order_by(Todo.due_date.desc())
        ).all()
    )


def count_upcoming_todos(session: Session, today: date, *, days: int = 3) -> int:
    """Pending todos due after today and within ``days`` days."""
    horizon = today + timedelta(days=days)
    return int(
        session.scalar(
            select(func.count(Todo.id)).where(
                Todo.status == "pending",
                _due_day() > today.isoformat(),
                _due_day() <= horizon.isoformat(),
            )
        )
        or 0
    )


def list_completed_between(session: Session, start: datetime, end: datetime) -> list[Todo]:
    return list(
        session.scalars(
            select(Todo)
            .where(Todo.status == "done", Todo.updated_at >= start, Todo.updated_at < end)
            .order_by(Todo.updated_at.desc())
        ).all()
    )
