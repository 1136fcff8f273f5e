from __future__ import annotations

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from plan_todos.db.models import Milestone, Plan, Step, Target, Task, Todo

# status value that marks a row as finished, per table
DONE_STATUS = {
    Todo: "done",
    Task: "done",
    Step: "completed",
    Milestone: "completed",
}


def count_rows(session: Session, model) -> int:
    return int(session.scalar(select(func.count()).select_from(model)) or 0)


def entity_counts(session: Session) -> dict[str, int]:
    return {
        "todo": count_rows(session, Todo),
        "plan": count_rows(session, Plan),
        "task": count_rows(session, Task),
        "target": count_rows(session, Target),
        "step": count_rows(session, Step),
        "milestone": count_rows(session, Milestone),
    }


def done_and_total(session: Session, model) -> tuple[int, int]:
    """Return ``(done, total)`` for one of the tables in ``DONE_STATUS``."""
    row = session.execute(
        select(
            func.coalesce(func.sum(case((model.status == DONE_STATUS[model], 1), else_=0)), 0),
            func.count(model.id),
        )
    ).one()
    return int(row[0] or 0), int(row[1] or 0)
