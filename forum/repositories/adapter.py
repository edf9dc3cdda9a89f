"""
Storage adapter: one async record-access interface over two backends.

FixtureAdapter serves an in-memory collection loaded once at start-up and
never persists writes (supports_writes is False). TableStoreAdapter delegates
every call to a table client (DynamoDB or the SQL table store) with no local
cache; client calls block, so they run on the threadpool.

Not-found is reported as None (get_by_id) or [] (get_all/query_by_index).
Table store errors are logged and re-raised unchanged; there are no retries.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Sequence

from starlette.concurrency import run_in_threadpool

from forum.core.config import Settings
from forum.domain.entities import EntityDefinition
from forum.repositories.json_storage import load_fixture
from forum.repositories.table_store import TableClient, build_table_client

logger = logging.getLogger(__name__)


class StorageAdapter(ABC):
    mode: str = ""
    supports_writes: bool = False

    def __init__(self, table_name: str, primary_key: str = "id") -> None:
        self.table_name = table_name
        self.primary_key = primary_key

    @abstractmethod
    async def get_all(self) -> list[dict]: ...

    @abstractmethod
    async def get_by_id(self, record_id: Any) -> dict | None: ...

    @abstractmethod
    async def query_by_index(self, index_name: str, key_name: str, key_value: Any) -> list[dict]: ...

    @abstractmethod
    async def create(self, item: dict) -> dict: ...

    @abstractmethod
    async def update(self, record_id: Any, updates: Mapping[str, Any]) -> dict: ...

    @abstractmethod
    async def delete(self, record_id: Any) -> bool: ...

    @abstractmethod
    async def count(self) -> int: ...

    @abstractmethod
    async def health_check(self) -> dict: ...


class FixtureAdapter(StorageAdapter):
    """Read-only view over a static record collection."""

    mode = "json"
    supports_writes = False

    def __init__(self, table_name: str, records: Sequence[dict] | None = None, primary_key: str = "id") -> None:
        super().__init__(table_name, primary_key)
        self._records: list[dict] = list(records or [])
        logger.info("Database mode: JSON file (%s, %d records)", table_name, len(self._records))

    @staticmethod
    def _matches(item: Mapping[str, Any], field: str, value: Any) -> bool:
        return item.get(field) is not None and str(item[field]) == str(value)

    async def get_all(self) -> list[dict]:
        return self._records

    async def get_by_id(self, record_id: Any) -> dict | None:
        for item in self._records:
            if self._matches(item, self.primary_key, record_id):
                return item
        return None

    async def query_by_index(self, index_name: str, key_name: str, key_value: Any) -> list[dict]:
        # no indexes here: index_name is ignored and every record is scanned
        return [item for item in self._records if self._matches(item, key_name, key_value)]

    async def create(self, item: dict) -> dict:
        logger.warning("JSON mode is read-only, cannot create items in %s", self.table_name)
        return item

    async def update(self, record_id: Any, updates: Mapping[str, Any]) -> dict:
        logger.warning("JSON mode is read-only, cannot update items in %s", self.table_name)
        current = await self.get_by_id(record_id)
        return {**(current or {}), **updates}

    async def delete(self, record_id: Any) -> bool:
        logger.warning("JSON mode is read-only, cannot delete items in %s", self.table_name)
        return False

    async def count(self) -> int:
        return len(self._records)

    async def health_check(self) -> dict:
        return {"status": "healthy", "mode": self.mode, "items": len(self._records)}


class TableStoreAdapter(StorageAdapter):
    """Live round trips to a table store through an injected client."""

    supports_writes = True

    def __init__(self, table_name: str, client: TableClient, primary_key: str = "id") -> None:
        super().__init__(table_name, primary_key)
        self.client = client
        self.mode = client.backend
        logger.info("Database mode: %s (table %s)", self.mode, table_name)

    def _key(self, record_id: Any) -> dict:
        return {self.primary_key: str(record_id)}

    async def _call(self, operation: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await run_in_threadpool(func, *args)
        except Exception as exc:
            logger.error("%s %s error on %s: %s", self.mode, operation, self.table_name, exc)
            raise

    async def get_all(self) -> list[dict]:
        return await self._call("scan", self.client.scan) or []

    async def get_by_id(self, record_id: Any) -> dict | None:
        return await self._call("get", self.client.get_item, self._key(record_id)) or None

    async def query_by_index(self, index_name: str, key_name: str, key_value: Any) -> list[dict]:
        items = await self._call("query", self.client.query, index_name, key_name, str(key_value))
        return items or []

    async def create(self, item: dict) -> dict:
        # unconditional put: last write wins
        await self._call("put", self.client.put_item, item)
        return item

    async def update(self, record_id: Any, updates: Mapping[str, Any]) -> dict:
        if not updates:
            return await self.get_by_id(record_id) or {}
        return await self._call("update", self.client.update_item, self._key(record_id), dict(updates))

    async def delete(self, record_id: Any) -> bool:
        await self._call("delete", self.client.delete_item, self._key(record_id))
        return True

    async def count(self) -> int:
        return await self._call("count", self.client.count) or 0

    async def health_check(self) -> dict:
        try:
            await run_in_threadpool(self.client.scan, 1)
        except Exception as exc:
            logger.warning("Health check failed for %s: %s", self.table_name, exc)
            return {"status": "unhealthy", "mode": self.mode, "error": str(exc)}
        return {"status": "healthy", "mode": self.mode, "table": self.table_name}


def build_adapter(
    entity: EntityDefinition,
    settings: Settings,
    *,
    client: TableClient | None = None,
    records: Sequence[dict] | None = None,
) -> StorageAdapter:
    """
    Pick the backend once from settings. `client` and `records` override the
    table client and the fixture contents (tests, scripts).
    """
    primary_key = entity.primary_key(settings.uses_table_store)
    if settings.uses_table_store:
        table_name = settings.table_name(entity.name)
        if client is None:
            client = build_table_client(settings, table_name, primary_key)
        return TableStoreAdapter(table_name, client, primary_key)
    if records is None:
        records = load_fixture(settings.fixtures_dir, entity.name)
    return FixtureAdapter(entity.name, records, primary_key)
