from pathlib import Path
from typing import Iterator

import pytest
from sqlalchemy.orm import Session, sessionmaker

from plan_todos.config import settings
from plan_todos.db import session as session_mod


@pytest.fixture()
def session_factory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> sessionmaker:
    db_path = tmp_path / "plan_todos_test.db"
    engine = session_mod.build_engine(session_mod.build_database_url(str(db_path)))
    session_mod.init_db(engine)
    factory = session_mod.build_session_factory(engine)
    monkeypatch.setattr(session_mod, "SessionLocal", factory)
    monkeypatch.setattr(settings, "timezone", "UTC")
    yield factory
    engine.dispose()


@pytest.fixture()
def session(session_factory: sessionmaker) -> Iterator[Session]:
    s = session_factory()
    try:
        yield s
    finally:
        s.close()
