"""Database helpers for the SQL table store (engine/session export)."""

from .session import Base, dispose_engines, get_engine, get_session

__all__ = ["Base", "dispose_engines", "get_engine", "get_session"]
