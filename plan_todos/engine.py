"""
Top-level operations of the progress and habit engine.

Each function takes exclusive access to the record store for its whole
duration and runs in a single transaction.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from plan_todos.core import circulation as circulation_sm
from plan_todos.core.dashboard import build_dashboard
from plan_todos.core.errors import NotFound
from plan_todos.core.productivity import productivity_summary
from plan_todos.core.progress import milestone_progress, target_progress
from plan_todos.core.statistics import build_statistics, completion_stats, trend_stats
from plan_todos.db.models import Circulation, CirculationLog
from plan_todos.db.repositories import circulations_repo, milestones_repo, targets_repo
from plan_todos.db.session import store_access
from plan_todos.logging_setup import log_operation


@log_operation("get_target_progress")
def get_target_progress(target_id: str) -> int:
    with store_access() as session:
        if targets_repo.get_target(session, target_id) is None:
            raise NotFound("target", target_id)
        return target_progress(session, target_id)


@log_operation("list_targets_with_progress")
def list_targets_with_progress() -> list[dict[str, Any]]:
    with store_access() as session:
        return [
            {
                "id": target.id,
                "title": target.title,
                "status": target.status,
                "due_date": target.due_date,
                "progress": target_progress(session, target.id),
            }
            for target in targets_repo.list_targets(session)
        ]


@log_operation("get_milestone_progress")
def get_milestone_progress(milestone_id: str) -> int:
    with store_access() as session:
        milestone = milestones_repo.get_milestone(session, milestone_id)
        if milestone is None:
            raise NotFound("milestone", milestone_id)
        return milestone_progress(session, milestones_repo.link_of(milestone))


@log_operation("list_milestones_with_progress")
def list_milestones_with_progress() -> list[dict[str, Any]]:
    with store_access() as session:
        out = []
        for milestone in milestones_repo.list_milestones(session):
            link = milestones_repo.link_of(milestone)
            out.append(
                {
                    "id": milestone.id,
                    "title": milestone.title,
                    "status": milestone.status,
                    "target_date": milestone.target_date,
                    "link_kind": link.kind.value,
                    "link_id": link.biz_id,
                    "progress": milestone_progress(session, link),
                }
            )
        return out


@log_operation("check_in")
def check_in(circulation_id: str, note: str | None = None, *, now: datetime | None = None) -> Circulation:
    with store_access() as session:
        return circulation_sm.check_in(session, circulation_id, note, now=now)


@log_operation("undo_check_in")
def undo_check_in(circulation_id: str, *, now: datetime | None = None) -> Circulation:
    with store_access() as session:
        return circulation_sm.undo_check_in(session, circulation_id, now=now)


@log_operation("get_circulation_logs")
def get_circulation_logs(circulation_id: str, limit: int = 20) -> list[CirculationLog]:
    with store_access() as session:
        if circulations_repo.get_circulation(session, circulation_id) is None:
            raise NotFound("circulation", circulation_id)
        return circulations_repo.list_logs(session, circulation_id, limit=limit)


@log_operation("list_circulations")
def list_circulations(kind: str | None = None, frequency: str | None = None) -> list[Circulation]:
    with store_access() as session:
        return circulations_repo.list_circulations(session, kind=kind, frequency=frequency)


@log_operation("get_productivity_summary")
def get_productivity_summary(*, now: datetime | None = None) -> dict[str, int]:
    with store_access() as session:
        return productivity_summary(session, now=now).to_dict()


@log_operation("get_dashboard")
def get_dashboard(*, now: datetime | None = None) -> dict[str, Any]:
    with store_access() as session:
        return build_dashboard(session, now=now)


@log_operation("get_statistics")
def get_statistics(*, now: datetime | None = None) -> dict[str, Any]:
    with store_access() as session:
        return build_statistics(session, now=now)


@log_operation("get_completion_stats")
def get_completion_stats() -> dict[str, Any]:
    with store_access() as session:
        return completion_stats(session)


@log_operation("get_trend_stats")
def get_trend_stats(*, now: datetime | None = None) -> list[dict[str, Any]]:
    with store_access() as session:
        return trend_stats(session, now=now)
