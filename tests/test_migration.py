from __future__ import annotations

import json
import logging

import pytest

from forum.domain.records import post_to_item, thread_to_item, user_to_item
from forum.repositories.table_store import SQLTableClient
from scripts import migrate_to_dynamodb as migration


class RecordingClient:
    """Stand-in table client remembering each batch_write call."""

    backend = "fake"

    def __init__(self, table_name: str, unprocessed_per_batch: int = 0, fail_count: bool = False) -> None:
        self.table_name = table_name
        self.batches: list[list[dict]] = []
        self._unprocessed = unprocessed_per_batch
        self._fail_count = fail_count

    def batch_write(self, items):
        self.batches.append(list(items))
        return list(items)[: self._unprocessed]

    def count(self):
        if self._fail_count:
            raise RuntimeError("scan denied")
        return sum(len(b) for b in self.batches)


def _write_fixture(directory, entity, records):
    (directory / f"{entity}.json").write_text(json.dumps({entity: records}), encoding="utf-8")


def test_user_transform():
    item = user_to_item({"id": 3, "name": "Charlie", "email": "c@example.com"})

    assert item["userId"] == "3"
    assert item["name"] == "Charlie"
    assert item["email"] == "c@example.com"
    assert item["createdAt"]


def test_thread_transform_defaults():
    item = thread_to_item({"id": 1, "title": "Hi"})
    assert item["threadId"] == "1"
    assert item["description"] == ""

    kept = thread_to_item({"id": 2, "title": "x", "description": "d", "createdAt": "2024-01-01T00:00:00Z"})
    assert kept["description"] == "d"
    assert kept["createdAt"] == "2024-01-01T00:00:00Z"


def test_post_transform_defaults():
    item = post_to_item({"id": 9, "body": "from body"})

    assert item == {
        "postId": "9",
        "threadId": "1",
        "userId": "1",
        "content": "from body",
        "title": "",
        "createdAt": item["createdAt"],
    }
    assert post_to_item({"id": 1, "threadId": 4, "userId": 5, "content": "c"})["threadId"] == "4"


def test_batches_respect_store_limit():
    client = RecordingClient("posts-table")

    written = migration.batch_write_items(client, [{"postId": str(i)} for i in range(60)])

    assert [len(b) for b in client.batches] == [25, 25, 10]
    assert written == 60


def test_unprocessed_items_are_logged_not_retried(caplog):
    client = RecordingClient("posts-table", unprocessed_per_batch=2)

    with caplog.at_level(logging.WARNING, logger="migrate"):
        written = migration.batch_write_items(client, [{"postId": str(i)} for i in range(30)])

    assert len(client.batches) == 2
    assert written == 26
    assert "2 unprocessed items for posts-table" in caplog.text


def test_batch_error_aborts():
    class Broken(RecordingClient):
        def batch_write(self, items):
            raise RuntimeError("throttled")

    with pytest.raises(RuntimeError):
        migration.batch_write_items(Broken("users-table"), [{"userId": "1"}])


def test_migrate_skips_missing_fixtures(tmp_path, forum_records):
    _write_fixture(tmp_path, "users", forum_records["users"])
    _write_fixture(tmp_path, "posts", forum_records["posts"])
    clients = {}

    def factory(entity):
        clients[entity] = RecordingClient(f"{entity}-table")
        return clients[entity]

    migrated = migration.migrate(tmp_path, factory)

    assert migrated == {"users": 2, "threads": None, "posts": 3}
    assert clients["threads"].batches == []
    assert [item["postId"] for item in clients["posts"].batches[0]] == ["1", "2", "3"]


def test_verify_reports_failures_without_aborting(caplog):
    clients = {
        "users": RecordingClient("users-table", fail_count=True),
        "posts": RecordingClient("posts-table"),
    }

    with caplog.at_level(logging.INFO, logger="migrate"):
        counts = migration.verify_migration(clients)

    assert counts == {"users": None, "posts": 0}
    assert "Error verifying Users: scan denied" in caplog.text


def test_migrate_into_sql_store(tmp_path, sqlite_url, forum_records):
    for entity in ("users", "threads", "posts"):
        _write_fixture(tmp_path, entity, forum_records[entity])

    def factory(entity):
        key = {"users": "userId", "threads": "threadId", "posts": "postId"}[entity]
        return SQLTableClient(f"{entity}-table", key, sqlite_url)

    migration.migrate(tmp_path, factory)

    posts = SQLTableClient("posts-table", "postId", sqlite_url)
    assert posts.count() == 3
    assert posts.get_item({"postId": "2"})["content"] == "Great discussion!"
    assert SQLTableClient("users-table", "userId", sqlite_url).get_item({"userId": "1"})["email"] == "alice@example.com"
