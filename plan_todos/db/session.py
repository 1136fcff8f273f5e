from contextlib import contextmanager
from pathlib import Path
import threading
from typing import Iterator

from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from plan_todos.config import settings
from plan_todos.db.models import Base


def build_database_url(sqlite_path: str | None = None) -> str:
    db_path = Path(sqlite_path or settings.sqlite_path)
    if not db_path.is_absolute():
        db_path = Path.cwd() / db_path
    db_path = db_path.resolve()
    return f"sqlite+pysqlite:///{db_path.as_posix()}"


def _set_sqlite_pragma(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str | None = None) -> Engine:
    new_engine = create_engine(url or build_database_url(), future=True)
    event.listen(new_engine, "connect", _set_sqlite_pragma)
    return new_engine


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


engine = build_engine()
SessionLocal = build_session_factory(engine)

_store_lock = threading.Lock()


def init_db(bind: Engine | None = None) -> None:
    target = bind or engine
    if target.url.database:
        Path(target.url.database).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(target)
    logger.info("database schema ready url={}", target.url.render_as_string(hide_password=True))


@contextmanager
def get_session() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def store_access() -> Iterator[Session]:
    """Exclusive access to the record store for one top-level operation.

    The lock is held until the session has been committed (or rolled back)
    and closed.
    """
    with _store_lock:
        with get_session() as session:
            yield session
