from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from plan_todos.core.productivity import productivity_summary
from plan_todos.core.progress import milestone_progress, ratio_percent, target_progress
from plan_todos.core.timeutil import as_utc, local_date, local_day_start, now_utc
from plan_todos.db.models import Todo
from plan_todos.db.repositories.milestones_repo import link_of, list_pending_milestones
from plan_todos.db.repositories.plans_repo import count_plan_tasks, list_active_plans
from plan_todos.db.repositories.stats_repo import entity_counts
from plan_todos.db.repositories.targets_repo import list_active_targets
from plan_todos.db.repositories.todos_repo import (
    count_upcoming_todos,
    list_completed_between,
    list_due_open_todos,
    list_overdue_todos,
)


def _todo_summary(todo: Todo) -> dict[str, Any]:
    return {
        "id": todo.id,
        "title": todo.title,
        "due_date": todo.due_date,
        "status": todo.status,
        "priority": todo.priority or "P2",
    }


def build_dashboard(session: Session, *, now: datetime | None = None) -> dict[str, Any]:
    now = as_utc(now or now_utc())
    today = local_date(now)
    summary = productivity_summary(session, now=now)

    today_todos = [_todo_summary(t) for t in list_due_open_todos(session, today)]
    overdue_todos = [_todo_summary(t) for t in list_overdue_todos(session, today)]
    completed_today = [
        _todo_summary(t)
        for t in list_completed_between(
            session, local_day_start(today), local_day_start(today + timedelta(days=1))
        )
    ]

    plans = []
    for plan in list_active_plans(session):
        total, done = count_plan_tasks(session, plan.id)
        plans.append(
            {
                "id": plan.id,
                "title": plan.title,
                "progress": ratio_percent(done, total),
                "task_count": total,
                "completed_count": done,
            }
        )

    targets = [
        {
            "id": target.id,
            "title": target.title,
            "due_date": target.due_date,
            "progress": target_progress(session, target.id),
        }
        for target in list_active_targets(session)
    ]

    milestones = [
        {
            "id": milestone.id,
            "title": milestone.title,
            "target_date": milestone.target_date,
            "progress": milestone_progress(session, link_of(milestone)),
        }
        for milestone in list_pending_milestones(session)
    ]

    counts = entity_counts(session)
    return {
        "overview": {
            "todo_count": counts["todo"],
            "today_todos_count": len(today_todos),
            "upcoming_3days_count": count_upcoming_todos(session, today, days=3),
            "completed_today_count": len(completed_today),
            "overdue_count": len(overdue_todos),
            "streak_days": summary.streak,
            "productivity_score": summary.score,
        },
        "week": {"completed_count": summary.week_completed},
        "counts": counts,
        "today_todos": today_todos,
        "overdue_todos": overdue_todos,
        "completed_today": completed_today,
        "active_plans": plans,
        "active_targets": targets,
        "active_milestones": milestones,
    }
