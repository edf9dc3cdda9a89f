"""Engine/session helpers for the SQL table store."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from forum.core.config import get_settings

Base = declarative_base()

_engines: dict[str, Engine] = {}
_sessionmakers: dict[str, sessionmaker] = {}


def _resolve_url(url: str | None) -> str:
    resolved = (url or get_settings().database_url or "").strip()
    if not resolved:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    return resolved


def get_engine(url: str | None = None) -> Engine:
    resolved = _resolve_url(url)
    engine = _engines.get(resolved)
    if engine is None:
        connect_args = {}
        if resolved.startswith("sqlite"):
            # table store calls run on the threadpool, not the creating thread
            connect_args["check_same_thread"] = False
        engine = create_engine(resolved, future=True, pool_pre_ping=True, connect_args=connect_args)
        _engines[resolved] = engine
    return engine


def _get_sessionmaker(url: str | None = None) -> sessionmaker:
    resolved = _resolve_url(url)
    factory = _sessionmakers.get(resolved)
    if factory is None:
        factory = sessionmaker(bind=get_engine(resolved), autoflush=False, autocommit=False, future=True)
        _sessionmakers[resolved] = factory
    return factory


@contextmanager
def get_session(url: str | None = None) -> Iterator[Session]:
    """Yield a session; commit on success, roll back on error."""
    session: Session = _get_sessionmaker(url)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispose_engines() -> None:
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
    _sessionmakers.clear()
