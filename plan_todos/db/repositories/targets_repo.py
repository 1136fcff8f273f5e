from __future__ import annotations

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from plan_todos.core.errors import ConstraintViolation, NotFound
from plan_todos.core.timeutil import now_utc
from plan_todos.db.models import Step, Target

MAX_TOTAL_WEIGHT = 100
STEP_STATUSES = {"pending", "completed"}


def create_target(
    session: Session,
    *,
    title: str,
    description: str | None = None,
    due_date: str | None = None,
    status: str = "active",
) -> Target:
    if not title.strip():
        raise ValueError("Title cannot be empty")
    target = Target(title=title, description=description, due_date=due_date, status=status)
    session.add(target)
    session.flush()
    return target


def get_target(session: Session, target_id: str) -> Target | None:
    return session.get(Target, target_id)


def list_targets(session: Session, *, status: str | None = None) -> list[Target]:
    stmt = select(Target)
    if status is not None:
        stmt = stmt.where(Target.status == status)
    return list(session.scalars(stmt.order_by(Target.created_at)).all())


def list_active_targets(session: Session, *, limit: int = 5) -> list[Target]:
    return list(
        session.scalars(
            select(Target)
            .where(Target.status == "active")
            .order_by(Target.due_date.is_(None), Target.due_date.asc())
            .limit(int(limit))
        ).all()
    )


def list_steps(session: Session, target_id: str) -> list[Step]:
    return list(session.scalars(select(Step).where(Step.target_id == target_id).order_by(Step.created_at)).all())


def _weight_sum(session: Session, target_id: str, *, exclude_step_id: str | None = None) -> int:
    stmt = select(func.coalesce(func.sum(Step.weight), 0)).where(Step.target_id == target_id)
    if exclude_step_id is not None:
        stmt = stmt.where(Step.id != exclude_step_id)
    return int(session.scalar(stmt) or 0)


def _check_weight(session: Session, target_id: str, weight: int, *, exclude_step_id: str | None = None) -> None:
    if weight < 0 or weight > MAX_TOTAL_WEIGHT:
        raise ConstraintViolation(f"Step weight must be between 0 and {MAX_TOTAL_WEIGHT}, got {weight}")
    current = _weight_sum(session, target_id, exclude_step_id=exclude_step_id)
    if current + weight > MAX_TOTAL_WEIGHT:
        logger.info(
            "step weight rejected target_id={} current={} requested={}", target_id, current, weight
        )
        raise ConstraintViolation(
            f"Step weights would exceed 100%. Current: {current}%, New: {weight}%"
        )


def create_step(
    session: Session,
    *,
    target_id: str,
    title: str,
    weight: int,
    status: str = "pending",
) -> Step:
    """
    Create a step under a target.
    Rules:
    - target must exist
    - sum of weights of all steps of the target stays <= 100
    - nothing is written when a rule fails
    """
    if session.get(Target, target_id) is None:
        raise NotFound("target", target_id)
    if status not in STEP_STATUSES:
        raise ValueError(f"Invalid step status: {status}")
    _check_weight(session, target_id, int(weight))

    step = Step(target_id=target_id, title=title, weight=int(weight), status=status)
    session.add(step)
    session.flush()
    return step


def update_step(
    session: Session,
    step_id: str,
    *,
    title: str | None = None,
    weight: int | None = None,
    status: str | None = None,
) -> Step:
    step = session.get(Step, step_id)
    if step is None:
        raise NotFound("step", step_id)
    if status is not None and status not in STEP_STATUSES:
        raise ValueError(f"Invalid step status: {status}")
    if weight is not None:
        _check_weight(session, step.target_id, int(weight), exclude_step_id=step.id)
        step.weight = int(weight)
    if title is not None:
        step.title = title
    if status is not None:
        step.status = status
    step.updated_at = now_utc()
    session.flush()
    return step


def delete_step(session: Session, step_id: str) -> None:
    step = session.get(Step, step_id)
    if step is None:
        return
    session.delete(step)
    session.flush()
