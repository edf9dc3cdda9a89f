from __future__ import annotations

import sys
from pathlib import Path

import pytest

# make the forum package (and scripts/) importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from forum.core import config as core_config  # noqa: E402
from forum.db import session as db_session  # noqa: E402
from forum.db.create_tables import create_all, drop_all  # noqa: E402

ENV_VARS = (
    "APP_ENV",
    "PORT",
    "LOG_LEVEL",
    "AWS_REGION",
    "DYNAMODB_ENDPOINT_URL",
    "STORAGE_BACKEND",
    "USE_DYNAMODB",
    "DATABASE_URL",
    "FIXTURES_DIR",
    "DYNAMODB_USERS_TABLE",
    "DYNAMODB_THREADS_TABLE",
    "DYNAMODB_POSTS_TABLE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from the caller's environment and the settings cache."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    core_config.get_settings.cache_clear()
    yield
    core_config.get_settings.cache_clear()


@pytest.fixture()
def sqlite_url(tmp_path, monkeypatch):
    """Temporary SQLite table store, torn down so the file is not left locked."""
    db_file = tmp_path / "table_store.db"
    url = f"sqlite:///{db_file}"
    monkeypatch.setenv("DATABASE_URL", url)
    core_config.get_settings.cache_clear()
    create_all(url)

    yield url

    try:
        drop_all(url)
    finally:
        db_session.dispose_engines()


@pytest.fixture()
def forum_records():
    return {
        "users": [
            {"id": 1, "name": "Alice Johnson", "email": "alice@example.com"},
            {"id": 2, "name": "Bob Smith", "email": "bob@example.com"},
        ],
        "threads": [
            {"id": 1, "userId": 1, "title": "Welcome", "category": "general"},
            {"id": 2, "userId": 2, "title": "Release notes", "category": "news"},
        ],
        "posts": [
            {"id": 1, "threadId": 1, "userId": 1, "content": "First post!"},
            {"id": 2, "threadId": 1, "userId": 2, "content": "Great discussion!"},
            {"id": 3, "threadId": 2, "userId": 1, "content": "Another post"},
        ],
    }
