#!/usr/bin/env python3
"""
One-off migration script: JSON fixtures (<entity>.json) -> table store.

Usage:
  python scripts/migrate_to_dynamodb.py [--fixtures-dir data] [--skip-verify]

The target backend follows STORAGE_BACKEND (dynamodb by default here; set
STORAGE_BACKEND=sql with DATABASE_URL to load the SQL table store instead).
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Mapping, Sequence

# make the forum package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from forum.core.config import Settings, get_settings
from forum.core.log import configure_logging
from forum.domain.entities import ENTITIES
from forum.domain.records import ITEM_TRANSFORMS
from forum.repositories import json_storage
from forum.repositories.table_store import MAX_BATCH_SIZE, TableClient, build_table_client

logger = logging.getLogger("migrate")

MIGRATION_ORDER = ("users", "threads", "posts")

ClientFactory = Callable[[str], TableClient]


def batch_write_items(client: TableClient, items: Sequence[Mapping], batch_size: int = MAX_BATCH_SIZE) -> int:
    """
    Write items in batches; unprocessed items are logged and dropped, not
    retried. Returns the number of items the store accepted.
    """
    written = 0
    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]
        batch_no = start // batch_size + 1
        try:
            unprocessed = client.batch_write(batch)
        except Exception as exc:
            logger.error("Error writing batch %d to %s: %s", batch_no, client.table_name, exc)
            raise
        if unprocessed:
            logger.warning("%d unprocessed items for %s", len(unprocessed), client.table_name)
        written += len(batch) - len(unprocessed)
        logger.info("Batch %d: wrote %d items to %s", batch_no, len(batch), client.table_name)
    return written


def migrate_entity(entity: str, fixtures_dir: Path, client: TableClient) -> int | None:
    """Migrate one fixture file; returns None when the file does not exist."""
    logger.info("Migrating %s...", entity.capitalize())
    path = json_storage.fixture_path(fixtures_dir, entity)
    if not path.exists():
        logger.info("%s not found, skipping...", path)
        return None
    records = json_storage.load(path, entity)
    items = [ITEM_TRANSFORMS[entity](record) for record in records]
    batch_write_items(client, items)
    logger.info("Migrated %d %s", len(items), entity)
    return len(items)


def verify_migration(clients: Mapping[str, TableClient]) -> dict[str, int | None]:
    """Count items per table; a failing table is logged and reported as None."""
    logger.info("Verifying migration...")
    counts: dict[str, int | None] = {}
    for entity, client in clients.items():
        try:
            counts[entity] = client.count()
            logger.info("%s: %d items", entity.capitalize(), counts[entity])
        except Exception as exc:
            logger.error("Error verifying %s: %s", entity.capitalize(), exc)
            counts[entity] = None
    return counts


def default_client_factory(settings: Settings) -> ClientFactory:
    def factory(entity: str) -> TableClient:
        return build_table_client(
            settings,
            settings.table_name(entity),
            ENTITIES[entity].primary_key(uses_table_store=True),
        )

    return factory


def migrate(fixtures_dir: Path, client_factory: ClientFactory, *, verify: bool = True) -> dict[str, int | None]:
    clients = {entity: client_factory(entity) for entity in MIGRATION_ORDER}
    migrated = {entity: migrate_entity(entity, fixtures_dir, clients[entity]) for entity in MIGRATION_ORDER}
    if verify:
        verify_migration(clients)
    return migrated


def main() -> None:
    os.environ.setdefault("STORAGE_BACKEND", "dynamodb")
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Migrate JSON fixtures into the table store")
    ap.add_argument("--fixtures-dir", type=Path, default=settings.fixtures_dir, help="directory holding <entity>.json files")
    ap.add_argument("--skip-verify", action="store_true", help="skip the item count pass")
    args = ap.parse_args()

    configure_logging(settings.log_level)
    if not settings.uses_table_store:
        raise SystemExit("STORAGE_BACKEND must be dynamodb or sql for a migration")
    logger.info("Starting migration (backend %s, region %s)", settings.storage_backend, settings.aws_region)
    logger.info("Tables: %s", ", ".join(settings.table_name(e) for e in MIGRATION_ORDER))

    migrate(args.fixtures_dir, default_client_factory(settings), verify=not args.skip_verify)
    logger.info("Migration completed successfully!")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        logger.error("Migration failed: %s", exc)
        raise SystemExit(1)
