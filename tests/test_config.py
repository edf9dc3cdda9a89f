from __future__ import annotations

import pytest

from forum.core.config import DEFAULT_FIXTURES_DIR, get_settings
from forum.domain.entities import POSTS, USERS


def test_defaults():
    settings = get_settings()

    assert settings.storage_backend == "json"
    assert settings.uses_table_store is False
    assert settings.posts_table == "forum-microservices-posts-dev"
    assert settings.fixtures_dir == DEFAULT_FIXTURES_DIR
    assert settings.port == 3000


def test_legacy_use_dynamodb_flag(monkeypatch):
    monkeypatch.setenv("USE_DYNAMODB", "true")

    assert get_settings().storage_backend == "dynamodb"


def test_storage_backend_wins_over_legacy_flag(monkeypatch):
    monkeypatch.setenv("USE_DYNAMODB", "true")
    monkeypatch.setenv("STORAGE_BACKEND", "sql")

    assert get_settings().storage_backend == "sql"


def test_invalid_backend(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "redis")

    with pytest.raises(ValueError):
        get_settings()


def test_table_names(monkeypatch):
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("DYNAMODB_USERS_TABLE", "people")
    settings = get_settings()

    assert settings.table_name("users") == "people"
    assert settings.table_name("threads") == "forum-microservices-threads-prod"
    with pytest.raises(ValueError):
        settings.table_name("comments")


def test_primary_key_depends_on_backend():
    assert POSTS.primary_key(uses_table_store=True) == "postId"
    assert POSTS.primary_key(uses_table_store=False) == "id"
    assert USERS.supports_create is False
