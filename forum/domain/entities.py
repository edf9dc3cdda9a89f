"""Static description of the three forum entities."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class IndexRoute:
    """A secondary-key lookup exposed as GET /<segment>/{value}."""

    segment: str
    index_name: str
    key_name: str


@dataclass(frozen=True)
class CreateField:
    name: str
    default: str | None = None


@dataclass(frozen=True)
class EntityDefinition:
    name: str
    label: str
    service_name: str
    table_key: str
    fixture_key: str = "id"
    index_routes: tuple[IndexRoute, ...] = ()
    create_fields: tuple[CreateField, ...] = field(default_factory=tuple)

    @property
    def supports_create(self) -> bool:
        return bool(self.create_fields)

    def primary_key(self, uses_table_store: bool) -> str:
        return self.table_key if uses_table_store else self.fixture_key


POSTS = EntityDefinition(
    name="posts",
    label="Post",
    service_name="posts-service",
    table_key="postId",
    index_routes=(
        IndexRoute("in-thread", "threadId-index", "threadId"),
        IndexRoute("by-user", "userId-index", "userId"),
    ),
    create_fields=(CreateField("userId"), CreateField("threadId"), CreateField("content")),
)

THREADS = EntityDefinition(
    name="threads",
    label="Thread",
    service_name="threads-service",
    table_key="threadId",
    index_routes=(IndexRoute("by-user", "userId-index", "userId"),),
    create_fields=(CreateField("userId"), CreateField("title"), CreateField("category", default="general")),
)

USERS = EntityDefinition(
    name="users",
    label="User",
    service_name="users-service",
    table_key="userId",
    index_routes=(IndexRoute("by-email", "email-index", "email"),),
)

ENTITIES: Mapping[str, EntityDefinition] = {e.name: e for e in (POSTS, THREADS, USERS)}


def get_entity(name: str) -> EntityDefinition:
    try:
        return ENTITIES[name]
    except KeyError:
        raise ValueError(f"Unknown entity: {name}") from None
