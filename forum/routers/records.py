from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

from fastapi import APIRouter, Body, HTTPException, Request

from forum.domain.entities import EntityDefinition
from forum.services.record_service import (
    RecordNotFoundError,
    RecordService,
    UnknownIndexError,
)


def _get_record_service(request: Request) -> RecordService:
    svc = getattr(getattr(request.app, "state", None), "record_service", None)
    if not svc:
        raise RuntimeError("RecordService not configured")
    return svc


def mount_prefixes(entity: EntityDefinition) -> tuple[str, ...]:
    """Prefixes each service answers on; the bare prefix must come last so its /{id} does not shadow the others."""
    return (f"/api/{entity.name}", f"/{entity.name}", "")


def build_router(entity: EntityDefinition) -> APIRouter:
    router = APIRouter(tags=[entity.name])

    async def health(request: Request):
        svc = _get_record_service(request)
        return {
            "status": "healthy",
            "service": entity.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": await svc.health(),
        }

    async def list_records(request: Request):
        return await _get_record_service(request).list_records()

    def lookup(segment: str) -> Callable[..., Any]:
        async def find_by(value: str, request: Request):
            try:
                return await _get_record_service(request).find_by(segment, value)
            except UnknownIndexError as exc:
                raise HTTPException(404, str(exc))

        return find_by

    async def get_record(record_id: str, request: Request):
        try:
            return await _get_record_service(request).get_record(record_id)
        except RecordNotFoundError as exc:
            raise HTTPException(404, str(exc))

    async def create_record(request: Request, payload: dict | None = Body(None)):
        return await _get_record_service(request).create_record(payload)

    for prefix in mount_prefixes(entity):
        root = prefix or "/"
        router.add_api_route(f"{prefix}/health", health, methods=["GET"])
        router.add_api_route(root, list_records, methods=["GET"])
        if entity.supports_create:
            router.add_api_route(root, create_record, methods=["POST"], status_code=201)
        for route in entity.index_routes:
            router.add_api_route(f"{prefix}/{route.segment}/{{value}}", lookup(route.segment), methods=["GET"])
        router.add_api_route(f"{prefix}/{{record_id}}", get_record, methods=["GET"])

    return router
