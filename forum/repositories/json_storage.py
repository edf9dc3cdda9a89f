"""
Fixture loading for the JSON backend.

Each entity lives in `<fixtures_dir>/<entity>.json` as an object holding one
list under the entity name, e.g. {"posts": [...]}.
"""

from __future__ import annotations

from pathlib import Path
import json
import logging

logger = logging.getLogger(__name__)


def fixture_path(fixtures_dir: Path, entity: str) -> Path:
    return Path(fixtures_dir) / f"{entity}.json"


def load(path: Path, entity: str) -> list[dict]:
    """Read the records of `entity` from `path`; a missing file means no records."""
    if not path.exists():
        logger.warning("Fixture %s not found, serving an empty %s collection", path, entity)
        return []
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    records = data.get(entity) if isinstance(data, dict) else None
    if records is None:
        return []
    if not isinstance(records, list):
        raise ValueError(f"{path}: '{entity}' must be a list of records")
    return records


def load_fixture(fixtures_dir: Path, entity: str) -> list[dict]:
    return load(fixture_path(fixtures_dir, entity), entity)
