from __future__ import annotations

import asyncio

import pytest

from forum.domain.entities import POSTS, USERS
from forum.repositories.adapter import FixtureAdapter
from forum.services.record_service import (
    CreateNotSupportedError,
    RecordNotFoundError,
    RecordService,
    UnknownIndexError,
)


def test_get_record_raises_not_found(forum_records):
    svc = RecordService(POSTS, FixtureAdapter("posts", forum_records["posts"]))

    assert asyncio.run(svc.get_record("3"))["content"] == "Another post"
    with pytest.raises(RecordNotFoundError, match="Post not found"):
        asyncio.run(svc.get_record("404"))


def test_find_by_unknown_segment(forum_records):
    svc = RecordService(USERS, FixtureAdapter("users", forum_records["users"]))

    with pytest.raises(UnknownIndexError):
        asyncio.run(svc.find_by("in-thread", "1"))


def test_users_cannot_be_created():
    svc = RecordService(USERS, FixtureAdapter("users"))

    with pytest.raises(CreateNotSupportedError):
        asyncio.run(svc.create_record({"name": "Eve"}))


def test_create_uses_adapter_primary_key():
    svc = RecordService(POSTS, FixtureAdapter("posts", primary_key="postId"))

    post = asyncio.run(svc.create_record({"userId": "1", "threadId": "2", "content": "x"}))

    assert set(post) == {"postId", "userId", "threadId", "content", "createdAt"}
