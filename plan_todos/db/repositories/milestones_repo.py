from __future__ import annotations

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from plan_todos.core.errors import NotFound
from plan_todos.core.links import LinkRef
from plan_todos.core.timeutil import now_utc
from plan_todos.db.models import Milestone


def link_of(milestone: Milestone) -> LinkRef:
    """Stored link of a milestone; a malformed pair reads as unlinked."""
    try:
        return LinkRef.parse(milestone.link_kind, milestone.link_id)
    except ValueError as exc:
        logger.warning(
            "milestone has malformed link, treating as unlinked id={} kind={} link_id={} error={}",
            milestone.id,
            milestone.link_kind,
            milestone.link_id,
            exc,
        )
        return LinkRef.none()


def create_milestone(
    session: Session,
    *,
    title: str,
    link: LinkRef | None = None,
    target_date: str | None = None,
) -> Milestone:
    if not title.strip():
        raise ValueError("Title cannot be empty")
    link = link or LinkRef.none()
    milestone = Milestone(
        title=title,
        target_date=target_date,
        link_kind=link.kind.value,
        link_id=link.biz_id,
        status="pending",
    )
    session.add(milestone)
    session.flush()
    return milestone


def get_milestone(session: Session, milestone_id: str) -> Milestone | None:
    return session.get(Milestone, milestone_id)


def list_milestones(session: Session, *, status: str | None = None) -> list[Milestone]:
    stmt = select(Milestone)
    if status is not None:
        stmt = stmt.where(Milestone.status == status)
    return list(session.scalars(stmt.order_by(Milestone.created_at)).all())


def list_pending_milestones(session: Session, *, limit: int = 3) -> list[Milestone]:
    return list(
        session.scalars(
            select(Milestone)
            .where(Milestone.status == "pending")
            .order_by(Milestone.target_date.is_(None), Milestone.target_date.asc())
            .limit(int(limit))
        ).all()
    )


def update_milestone_link(session: Session, milestone_id: str, link: LinkRef) -> Milestone:
    milestone = session.get(Milestone, milestone_id)
    if milestone is None:
        raise NotFound("milestone", milestone_id)
    milestone.link_kind = link.kind.value
    milestone.link_id = link.biz_id
    milestone.updated_at = now_utc()
    session.flush()
    return milestone
