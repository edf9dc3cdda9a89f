"""
Table store clients used by the table-store StorageAdapter.

A client is bound to one table and exposes the DynamoDB-shaped primitives the
adapter needs (get/put/update/delete by key, scan, count, index query and
batch writes). Calls are blocking; the adapter offloads them to a thread.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping, Protocol, Sequence

import boto3
from boto3.dynamodb.conditions import Key
from sqlalchemy import delete, func, select

from forum.core.config import Settings
from forum.db.create_tables import create_all
from forum.db.models import TableItem
from forum.db.session import get_session

logger = logging.getLogger(__name__)

# DynamoDB BatchWriteItem accepts at most 25 put/delete requests per call
MAX_BATCH_SIZE = 25


class TableClient(Protocol):
    backend: str
    table_name: str

    def get_item(self, key: Mapping[str, str]) -> dict | None: ...

    def put_item(self, item: Mapping[str, Any]) -> None: ...

    def update_item(self, key: Mapping[str, str], updates: Mapping[str, Any]) -> dict: ...

    def delete_item(self, key: Mapping[str, str]) -> None: ...

    def scan(self, limit: int | None = None) -> list[dict]: ...

    def count(self) -> int: ...

    def query(self, index_name: str, key_name: str, key_value: str) -> list[dict]: ...

    def batch_write(self, items: Sequence[Mapping[str, Any]]) -> list[dict]: ...


def build_update_expression(updates: Mapping[str, Any]) -> dict:
    """
    Translate a partial update into UpdateItem arguments, one placeholder pair
    per attribute: SET #attr0 = :val0, #attr1 = :val1.
    """
    assignments = []
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    for index, (attr, value) in enumerate(updates.items()):
        name_ref, value_ref = f"#attr{index}", f":val{index}"
        assignments.append(f"{name_ref} = {value_ref}")
        names[name_ref] = attr
        values[value_ref] = value
    return {
        "UpdateExpression": "SET " + ", ".join(assignments),
        "ExpressionAttributeNames": names,
        "ExpressionAttributeValues": values,
    }


class DynamoTableClient:
    """
    Client over a boto3 DynamoDB service resource.

    boto3 resources are not thread safe, so `resource_factory` is called once
    per worker thread and each thread keeps its own resource and Table.
    """

    backend = "dynamodb"

    def __init__(self, resource_factory: Callable[[], Any], table_name: str) -> None:
        self._resource_factory = resource_factory
        self._local = threading.local()
        self.table_name = table_name

    @classmethod
    def from_settings(cls, settings: Settings, table_name: str) -> DynamoTableClient:
        kwargs: dict[str, Any] = {"region_name": settings.aws_region}
        if settings.dynamodb_endpoint_url:
            kwargs["endpoint_url"] = settings.dynamodb_endpoint_url

        def resource_factory():
            return boto3.session.Session().resource("dynamodb", **kwargs)

        return cls(resource_factory, table_name)

    def _thread_state(self) -> threading.local:
        state = self._local
        if getattr(state, "resource", None) is None:
            state.resource = self._resource_factory()
            state.table = state.resource.Table(self.table_name)
        return state

    @property
    def _resource(self):
        return self._thread_state().resource

    @property
    def _table(self):
        return self._thread_state().table

    def get_item(self, key: Mapping[str, str]) -> dict | None:
        resp = self._table.get_item(Key=dict(key))
        return resp.get("Item")

    def put_item(self, item: Mapping[str, Any]) -> None:
        self._table.put_item(Item=dict(item))

    def update_item(self, key: Mapping[str, str], updates: Mapping[str, Any]) -> dict:
        resp = self._table.update_item(
            Key=dict(key),
            ReturnValues="ALL_NEW",
            **build_update_expression(updates),
        )
        return resp.get("Attributes") or {}

    def delete_item(self, key: Mapping[str, str]) -> None:
        self._table.delete_item(Key=dict(key))

    def scan(self, limit: int | None = None) -> list[dict]:
        params: dict[str, Any] = {}
        if limit:
            params["Limit"] = limit
        resp = self._table.scan(**params)
        return resp.get("Items") or []

    def count(self) -> int:
        resp = self._table.scan(Select="COUNT")
        return int(resp.get("Count") or 0)

    def query(self, index_name: str, key_name: str, key_value: str) -> list[dict]:
        resp = self._table.query(
            IndexName=index_name,
            KeyConditionExpression=Key(key_name).eq(key_value),
        )
        return resp.get("Items") or []

    def batch_write(self, items: Sequence[Mapping[str, Any]]) -> list[dict]:
        """Write up to MAX_BATCH_SIZE items in one call; return the unprocessed ones."""
        if len(items) > MAX_BATCH_SIZE:
            raise ValueError(f"batch_write accepts at most {MAX_BATCH_SIZE} items, got {len(items)}")
        if not items:
            return []
        resp = self._resource.batch_write_item(
            RequestItems={self.table_name: [{"PutRequest": {"Item": dict(item)}} for item in items]}
        )
        unprocessed = resp.get("UnprocessedItems") or {}
        return [req.get("PutRequest", {}).get("Item", {}) for req in unprocessed.get(self.table_name, [])]


class SQLTableClient:
    """
    Key-value table emulated on SQLAlchemy: documents are stored as JSON in
    `table_items`, keyed by (table name, stringified key attribute). Scans are
    ordered by first insertion (`created_at` is stamped in Python with
    microsecond precision and kept on overwrite). Index queries filter
    documents in Python, so the index name is informational only.
    """

    backend = "sql"

    def __init__(self, table_name: str, key_name: str, database_url: str | None = None) -> None:
        self.table_name = table_name
        self.key_name = key_name
        self.database_url = database_url or None

    def ensure_schema(self) -> None:
        create_all(self.database_url)

    def _item_key(self, source: Mapping[str, Any]) -> str:
        if source.get(self.key_name) is None:
            raise ValueError(f"Item for {self.table_name} is missing key attribute '{self.key_name}'")
        return str(source[self.key_name])

    def _row(self, item: Mapping[str, Any]) -> TableItem:
        return TableItem(table_name=self.table_name, item_key=self._item_key(item), data=dict(item))

    def get_item(self, key: Mapping[str, str]) -> dict | None:
        with get_session(self.database_url) as session:
            row = session.get(TableItem, (self.table_name, self._item_key(key)))
            return dict(row.data) if row else None

    def put_item(self, item: Mapping[str, Any]) -> None:
        with get_session(self.database_url) as session:
            session.merge(self._row(item))

    def update_item(self, key: Mapping[str, str], updates: Mapping[str, Any]) -> dict:
        item_key = self._item_key(key)
        with get_session(self.database_url) as session:
            row = session.get(TableItem, (self.table_name, item_key))
            if row is None:
                # UpdateItem semantics: a missing item is created from key + updates
                row = TableItem(table_name=self.table_name, item_key=item_key, data={self.key_name: item_key})
                session.add(row)
            merged = {**(row.data or {}), **updates}
            row.data = merged
        return dict(merged)

    def delete_item(self, key: Mapping[str, str]) -> None:
        with get_session(self.database_url) as session:
            session.execute(
                delete(TableItem).where(
                    TableItem.table_name == self.table_name,
                    TableItem.item_key == self._item_key(key),
                )
            )

    def scan(self, limit: int | None = None) -> list[dict]:
        stmt = (
            select(TableItem.data)
            .where(TableItem.table_name == self.table_name)
            .order_by(TableItem.created_at, TableItem.item_key)
        )
        if limit:
            stmt = stmt.limit(limit)
        with get_session(self.database_url) as session:
            return [dict(data) for data in session.execute(stmt).scalars().all()]

    def count(self) -> int:
        stmt = select(func.count()).select_from(TableItem).where(TableItem.table_name == self.table_name)
        with get_session(self.database_url) as session:
            return int(session.execute(stmt).scalar_one())

    def query(self, index_name: str, key_name: str, key_value: str) -> list[dict]:
        return [
            item
            for item in self.scan()
            if item.get(key_name) is not None and str(item[key_name]) == str(key_value)
        ]

    def batch_write(self, items: Sequence[Mapping[str, Any]]) -> list[dict]:
        with get_session(self.database_url) as session:
            for item in items:
                session.merge(self._row(item))
        return []


def build_table_client(settings: Settings, table_name: str, key_name: str) -> TableClient:
    """Construct the client for the configured table-store backend."""
    if settings.storage_backend == "dynamodb":
        logger.info("DynamoDB table: %s (region %s)", table_name, settings.aws_region)
        return DynamoTableClient.from_settings(settings, table_name)
    if settings.storage_backend == "sql":
        client = SQLTableClient(table_name, key_name, settings.database_url)
        client.ensure_schema()
        logger.info("SQL table store: %s", table_name)
        return client
    raise ValueError(f"Storage backend {settings.storage_backend!r} has no table client")
