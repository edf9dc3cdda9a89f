"""Create (or drop) the `table_items` schema used by the SQL table store."""
from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # ensure models are imported for metadata


def create_all(url: str | None = None) -> None:
    Base.metadata.create_all(bind=get_engine(url))


def drop_all(url: str | None = None) -> None:
    Base.metadata.drop_all(bind=get_engine(url))


def main() -> None:
    ap = argparse.ArgumentParser(description="Create the SQL table store schema")
    ap.add_argument("--database-url", help="SQLAlchemy URL (default: DATABASE_URL)")
    ap.add_argument("--drop", action="store_true", help="drop the schema before creating it")
    args = ap.parse_args()
    try:
        if args.drop:
            drop_all(args.database_url)
        create_all(args.database_url)
    except (SQLAlchemyError, RuntimeError) as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
    print("Database tables created successfully.")


if __name__ == "__main__":
    main()
