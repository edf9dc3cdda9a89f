"""
Configuration helpers for the forum services.

Routers, adapters and scripts read settings through get_settings() instead of
fetching os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

STORAGE_BACKENDS = ("json", "dynamodb", "sql")

DEFAULT_FIXTURES_DIR = Path(__file__).resolve().parents[2] / "data"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    port: int
    log_level: str
    storage_backend: str
    aws_region: str
    dynamodb_endpoint_url: str
    users_table: str
    threads_table: str
    posts_table: str
    database_url: str
    fixtures_dir: Path

    @property
    def uses_table_store(self) -> bool:
        return self.storage_backend != "json"

    def table_name(self, entity: str) -> str:
        tables = {
            "users": self.users_table,
            "threads": self.threads_table,
            "posts": self.posts_table,
        }
        try:
            return tables[entity]
        except KeyError:
            raise ValueError(f"Unknown entity: {entity}") from None


def _int(value: str | None, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _storage_backend() -> str:
    backend = (os.getenv("STORAGE_BACKEND") or "").strip().lower()
    if not backend:
        # USE_DYNAMODB predates STORAGE_BACKEND and is still honoured
        backend = "dynamodb" if _bool(os.getenv("USE_DYNAMODB")) else "json"
    if backend not in STORAGE_BACKENDS:
        raise ValueError(f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}")
    return backend


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    app_env = (os.getenv("APP_ENV") or "dev").lower()
    fixtures_dir = os.getenv("FIXTURES_DIR")

    return Settings(
        app_env=app_env,
        port=_int(os.getenv("PORT", "3000"), 3000),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        storage_backend=_storage_backend(),
        aws_region=os.getenv("AWS_REGION", "us-east-1"),
        dynamodb_endpoint_url=os.getenv("DYNAMODB_ENDPOINT_URL", ""),
        users_table=os.getenv("DYNAMODB_USERS_TABLE", f"forum-microservices-users-{app_env}"),
        threads_table=os.getenv("DYNAMODB_THREADS_TABLE", f"forum-microservices-threads-{app_env}"),
        posts_table=os.getenv("DYNAMODB_POSTS_TABLE", f"forum-microservices-posts-{app_env}"),
        database_url=os.getenv("DATABASE_URL", ""),
        fixtures_dir=Path(fixtures_dir) if fixtures_dir else DEFAULT_FIXTURES_DIR,
    )
