"""Domain helpers shaping records for the HTTP services and the migration."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Mapping

from forum.domain.entities import EntityDefinition


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-15T10:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_record(entity: EntityDefinition, primary_key: str, payload: Mapping[str, Any] | None) -> dict:
    """
    Build a record from a POST body: fresh uuid under the primary key, the
    entity's create fields (missing ones fall back to their default) and createdAt.
    """
    payload = payload or {}
    record: dict[str, Any] = {primary_key: str(uuid.uuid4())}
    for create_field in entity.create_fields:
        value = payload.get(create_field.name)
        if create_field.default is not None and not value:
            value = create_field.default
        record[create_field.name] = value
    record["createdAt"] = utc_now_iso()
    return record


def _str_or(value: Any, default: str) -> str:
    return str(value) if value else default


def user_to_item(user: Mapping[str, Any]) -> dict:
    return {
        "userId": str(user["id"]),
        "email": user.get("email"),
        "name": user.get("name"),
        "createdAt": utc_now_iso(),
    }


def thread_to_item(thread: Mapping[str, Any]) -> dict:
    return {
        "threadId": str(thread["id"]),
        "title": thread.get("title"),
        "description": thread.get("description") or "",
        "createdAt": thread.get("createdAt") or utc_now_iso(),
    }


def post_to_item(post: Mapping[str, Any]) -> dict:
    return {
        "postId": str(post["id"]),
        "threadId": _str_or(post.get("threadId"), "1"),
        "userId": _str_or(post.get("userId"), "1"),
        "content": post.get("content") or post.get("body") or "",
        "title": post.get("title") or "",
        "createdAt": post.get("createdAt") or utc_now_iso(),
    }


ITEM_TRANSFORMS = {
    "users": user_to_item,
    "threads": thread_to_item,
    "posts": post_to_item,
}
