"""Record use cases shared by the posts, threads and users services."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from forum.domain.entities import EntityDefinition, IndexRoute
from forum.domain.records import new_record
from forum.repositories.adapter import StorageAdapter

logger = logging.getLogger(__name__)


class RecordError(Exception):
    """Base exception for record workflows."""


class RecordNotFoundError(RecordError):
    """Raised when no record matches the requested id."""


class UnknownIndexError(RecordError):
    """Raised when a secondary-key route is not defined for the entity."""


class CreateNotSupportedError(RecordError):
    """Raised when the entity has no create operation."""


class RecordService:
    """Routes entity use cases to the storage adapter."""

    def __init__(self, entity: EntityDefinition, adapter: StorageAdapter) -> None:
        self.entity = entity
        self.adapter = adapter
        self._index_routes = {route.segment: route for route in entity.index_routes}

    def index_route(self, segment: str) -> IndexRoute:
        try:
            return self._index_routes[segment]
        except KeyError:
            raise UnknownIndexError(f"{self.entity.name} has no '{segment}' lookup") from None

    async def list_records(self) -> list[dict]:
        return await self.adapter.get_all()

    async def get_record(self, record_id: str) -> dict:
        record = await self.adapter.get_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(f"{self.entity.label} not found")
        return record

    async def find_by(self, segment: str, value: str) -> list[dict]:
        route = self.index_route(segment)
        return await self.adapter.query_by_index(route.index_name, route.key_name, value)

    async def create_record(self, payload: Mapping[str, Any] | None) -> dict:
        if not self.entity.supports_create:
            raise CreateNotSupportedError(f"{self.entity.name} cannot be created through this service")
        record = new_record(self.entity, self.adapter.primary_key, payload)
        stored = await self.adapter.create(record)
        if not self.adapter.supports_writes:
            logger.info("%s %s accepted but not persisted (read-only storage)", self.entity.label, record[self.adapter.primary_key])
        return stored

    async def health(self) -> dict:
        return await self.adapter.health_check()
