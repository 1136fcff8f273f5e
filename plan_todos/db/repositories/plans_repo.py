from __future__ import annotations

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from plan_todos.core.timeutil import now_utc
from plan_todos.db.models import Plan, Task

TASK_STATUSES = {"pending", "in-progress", "done"}
TASK_PRIORITIES = {"P0", "P1", "P2", "P3"}


def create_plan(
    session: Session,
    *,
    title: str,
    description: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    status: str = "active",
) -> Plan:
    if not title.strip():
        raise ValueError("Title cannot be empty")
    plan = Plan(
        title=title,
        description=description,
        start_date=start_date,
        end_date=end_date,
        status=status,
    )
    session.add(plan)
    session.flush()
    return plan


def create_task(
    session: Session,
    *,
    plan_id: str,
    title: str,
    description: str | None = None,
    status: str = "pending",
    priority: str = "P2",
) -> Task:
    if session.get(Plan, plan_id) is None:
        raise ValueError("Plan not found")
    if status not in TASK_STATUSES:
        raise ValueError(f"Invalid task status: {status}")
    if priority not in TASK_PRIORITIES:
        raise ValueError(f"Invalid task priority: {priority}")
    task = Task(plan_id=plan_id, title=title, description=description, status=status, priority=priority)
    session.add(task)
    session.flush()
    return task


def get_task(session: Session, task_id: str) -> Task | None:
    return session.get(Task, task_id)


def set_task_status(session: Session, task_id: str, status: str) -> Task:
    task = session.get(Task, task_id)
    if task is None:
        raise ValueError("Task not found")
    if status not in TASK_STATUSES:
        raise ValueError(f"Invalid task status: {status}")
    task.status = status
    task.updated_at = now_utc()
    session.flush()
    return task


def count_plan_tasks(session: Session, plan_id: str) -> tuple[int, int]:
    """Return ``(total, done)`` task counts for a plan."""
    row = session.execute(
        select(
            func.count(Task.id),
            func.coalesce(func.sum(case((Task.status == "done", 1), else_=0)), 0),
        ).where(Task.plan_id == plan_id)
    ).one()
    return int(row[0] or 0), int(row[1] or 0)


def list_active_plans(session: Session, *, limit: int = 5) -> list[Plan]:
    return list(
        session.scalars(
            select(Plan).where(Plan.status == "active").order_by(Plan.created_at.desc()).limit(int(limit))
        ).all()
    )
