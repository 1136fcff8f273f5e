from datetime import date, datetime, timedelta, timezone

from sqlalchemy.orm import Session, sessionmaker

from plan_todos import engine
from plan_todos.core.dashboard import build_dashboard
from plan_todos.core.statistics import completion_rate, completion_stats, daily_completions, trend_stats
from plan_todos.db.repositories.milestones_repo import create_milestone
from plan_todos.db.repositories.plans_repo import create_plan, create_task
from plan_todos.db.repositories.targets_repo import create_step, create_target
from plan_todos.db.repositories.todos_repo import create_todo, set_todo_status

NOW = datetime(2026, 5, 6, 12, 0, tzinfo=timezone.utc)


def _done(session: Session, title: str, when: datetime, due_date: str | None = None) -> None:
    todo = create_todo(session, title=title, due_date=due_date, now=when - timedelta(days=1))
    set_todo_status(session, todo.id, "done", now=when)


def test_completion_rate_rounds_and_handles_empty() -> None:
    assert completion_rate(0, 0) == 0.0
    assert completion_rate(1, 3) == 33.3
    assert completion_rate(2, 4) == 50.0


def test_completion_stats_per_entity(session: Session) -> None:
    _done(session, "a", NOW)
    _done(session, "b", NOW)
    create_todo(session, title="c", now=NOW)
    create_todo(session, title="d", now=NOW)

    plan = create_plan(session, title="Plan")
    create_task(session, plan_id=plan.id, title="t1", status="done")
    create_task(session, plan_id=plan.id, title="t2")
    create_task(session, plan_id=plan.id, title="t3", status="in-progress")

    target = create_target(session, title="Target")
    create_step(session, target_id=target.id, title="s1", weight=40, status="completed")
    create_step(session, target_id=target.id, title="s2", weight=60)

    reached = create_milestone(session, title="m1")
    reached.status = "completed"
    create_milestone(session, title="m2")
    create_milestone(session, title="m3")
    session.commit()

    stats = completion_stats(session)
    assert stats["todo"] == {"done": 2, "total": 4, "rate": 50.0}
    assert stats["task"] == {"done": 1, "total": 3, "rate": 33.3}
    assert stats["step"] == {"done": 1, "total": 2, "rate": 50.0}
    assert stats["milestone"] == {"done": 1, "total": 3, "rate": 33.3}


def test_completion_stats_empty_store(session: Session) -> None:
    stats = completion_stats(session)
    assert all(entry == {"done": 0, "total": 0, "rate": 0.0} for entry in stats.values())


def test_daily_completions_zero_fills_window() -> None:
    today = date(2026, 5, 6)
    stamps = [
        datetime(2026, 5, 6, 1, 0, tzinfo=timezone.utc),
        datetime(2026, 5, 2, 9, 0, tzinfo=timezone.utc),
        datetime(2026, 5, 2, 22, 0, tzinfo=timezone.utc),
        datetime(2026, 4, 29, 9, 0, tzinfo=timezone.utc),
    ]
    trend = daily_completions(stamps, today)
    assert trend[0]["date"] == "2026-04-30"
    assert trend[-1]["date"] == "2026-05-06"
    assert [row["completed"] for row in trend] == [0, 0, 2, 0, 0, 0, 1]


def test_trend_stats_from_store(session: Session) -> None:
    _done(session, "today", NOW)
    _done(session, "yesterday 1", NOW - timedelta(days=1))
    _done(session, "yesterday 2", NOW - timedelta(days=1, hours=2))
    _done(session, "six days ago", NOW - timedelta(days=6))
    _done(session, "seven days ago", NOW - timedelta(days=7))
    session.commit()

    trend = trend_stats(session, now=NOW)
    assert len(trend) == 7
    assert trend[0] == {"date": "2026-04-30", "completed": 1}
    assert trend[-2] == {"date": "2026-05-05", "completed": 2}
    assert trend[-1] == {"date": "2026-05-06", "completed": 1}
    assert sum(row["completed"] for row in trend) == 4


def test_dashboard_todo_lists_and_counters(session: Session) -> None:
    create_todo(session, title="Due yesterday", due_date="2026-05-05", now=NOW)
    create_todo(session, title="Due today", due_date="2026-05-06", status="in-progress", now=NOW)
    create_todo(session, title="Due in two days", due_date="2026-05-08", now=NOW)
    create_todo(session, title="Due in three days, started", due_date="2026-05-09", status="in-progress", now=NOW)
    create_todo(session, title="Due in five days", due_date="2026-05-11", now=NOW)
    create_todo(session, title="No due date", now=NOW)
    _done(session, "Finished late", NOW, due_date="2026-05-01")
    _done(session, "Finished yesterday", NOW - timedelta(days=1))
    session.commit()

    dashboard = build_dashboard(session, now=NOW)

    assert [t["title"] for t in dashboard["today_todos"]] == ["Due yesterday", "Due today"]
    assert [t["title"] for t in dashboard["overdue_todos"]] == ["Due yesterday"]
    assert [t["title"] for t in dashboard["completed_today"]] == ["Finished late"]
    assert dashboard["completed_today"][0]["priority"] == "P2"

    overview = dashboard["overview"]
    assert overview["todo_count"] == 8
    assert overview["today_todos_count"] == 2
    assert overview["upcoming_3days_count"] == 1
    assert overview["completed_today_count"] == 1
    assert overview["overdue_count"] == 1
    assert dashboard["counts"] == {"todo": 8, "plan": 0, "task": 0, "target": 0, "step": 0, "milestone": 0}


def test_get_statistics_operation(session_factory: sessionmaker) -> None:
    with session_factory() as s:
        plan = create_plan(s, title="Plan")
        create_task(s, plan_id=plan.id, title="t1", status="done")
        _done(s, "today", NOW)
        s.commit()

    stats = engine.get_statistics(now=NOW)
    assert set(stats) == {"counts", "completion", "trends", "efficiency"}
    assert stats["counts"]["plan"] == 1
    assert stats["counts"]["task"] == 1
    assert stats["completion"]["task"]["rate"] == 100.0
    assert stats["trends"][-1] == {"date": "2026-05-06", "completed": 1}
    assert stats["efficiency"]["today_completed"] == 1
    assert stats["efficiency"]["streak"] == 1

    assert engine.get_completion_stats()["todo"] == {"done": 1, "total": 1, "rate": 100.0}
    assert len(engine.get_trend_stats(now=NOW)) == 7
