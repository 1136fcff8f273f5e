from __future__ import annotations

from typing import Iterable

from loguru import logger
from sqlalchemy.orm import Session

from plan_todos.core.links import LinkKind, LinkRef
from plan_todos.db.repositories.plans_repo import count_plan_tasks, get_task
from plan_todos.db.repositories.targets_repo import get_target, list_steps


def ratio_percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return (part * 100) // whole


def weighted_progress(steps: Iterable[tuple[int, str]]) -> int:
    """Share of weight carried by completed steps, floored to 0..100."""
    total_weight = 0
    completed_weight = 0
    for weight, status in steps:
        total_weight += int(weight)
        if status == "completed":
            completed_weight += int(weight)
    return ratio_percent(completed_weight, total_weight)


def target_progress(session: Session, target_id: str) -> int:
    return weighted_progress((step.weight, step.status) for step in list_steps(session, target_id))


def plan_progress(session: Session, plan_id: str) -> int:
    total, done = count_plan_tasks(session, plan_id)
    return ratio_percent(done, total)


def _task_progress(session: Session, task_id: str) -> int:
    task = get_task(session, task_id)
    if task is None:
        logger.debug("milestone link points to missing task task_id={}", task_id)
        return 0
    return 100 if task.status == "done" else 0


def _linked_target_progress(session: Session, target_id: str) -> int:
    if get_target(session, target_id) is None:
        logger.debug("milestone link points to missing target target_id={}", target_id)
        return 0
    return target_progress(session, target_id)


def milestone_progress(session: Session, link: LinkRef) -> int:
    match link.kind:
        case LinkKind.PLAN:
            return plan_progress(session, link.biz_id)
        case LinkKind.TASK:
            return _task_progress(session, link.biz_id)
        case LinkKind.TARGET:
            return _linked_target_progress(session, link.biz_id)
        case LinkKind.CIRCULATION:
            # reserved: circulations carry no completion percentage yet
            return 0
        case _:
            return 0
