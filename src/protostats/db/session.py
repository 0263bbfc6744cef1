"""Database session management for the local document mirror.

Jobs are short-lived, so one engine and session factory per resolved
mirror path is kept for the life of the process.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from protostats.db.schema import Base

DEFAULT_DB_PATH = Path("data/protostats.db")

# Resolved path -> (engine, session factory)
_mirrors: dict[str, tuple[Engine, sessionmaker]] = {}


def _resolve(db_path: Path | None) -> Path:
    return Path(db_path) if db_path is not None else DEFAULT_DB_PATH


def _mirror(db_path: Path | None) -> tuple[Engine, sessionmaker]:
    path = _resolve(db_path)
    key = str(path.resolve())

    cached = _mirrors.get(key)
    if cached is not None:
        return cached

    path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{path}", echo=False)
    _mirrors[key] = (engine, sessionmaker(bind=engine))
    return _mirrors[key]


def get_engine(db_path: Path | None = None) -> Engine:
    """Engine for the mirror at db_path (default data/protostats.db)."""
    return _mirror(db_path)[0]


def get_session(db_path: Path | None = None) -> Session:
    """Open a session on the mirror.

    The caller closes it; SqlDocumentStore(owns_session=True) does so on
    close(). Use get_db_session() for scoped writes.
    """
    return _mirror(db_path)[1]()


@contextmanager
def get_db_session(db_path: Path | None = None) -> Generator[Session, None, None]:
    """Scoped session: commit on success, roll back on error, always close.

    Example:
        with get_db_session(path) as session:
            repo.put_document(session, "events", "e1", {...})
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | None = None) -> None:
    """Create the documents table if it does not exist yet."""
    Base.metadata.create_all(get_engine(db_path))
