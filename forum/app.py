from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from forum.core.config import Settings, get_settings
from forum.domain.entities import EntityDefinition, get_entity
from forum.repositories.adapter import StorageAdapter, build_adapter
from forum.routers.records import build_router
from forum.services.record_service import RecordService

logger = logging.getLogger(__name__)


def _error_body(message: str, service: str) -> dict:
    return {"error": message, "service": service}


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log every request as `METHOD /path - Nms`."""

    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        url = request.url.path + (f"?{request.url.query}" if request.url.query else "")
        logger.info("%s %s - %dms", request.method, url, elapsed_ms)
        return response


class ErrorMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions (e.g. table store failures) into a 500 JSON body."""

    def __init__(self, app, *, service_name: str) -> None:
        super().__init__(app)
        self._service_name = service_name

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Error handling %s %s", request.method, request.url.path)
            status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
            if not isinstance(status, int) or not 400 <= status < 600:
                status = 500
            return JSONResponse(_error_body(str(exc), self._service_name), status_code=status)


def create_app(
    entity: EntityDefinition | str,
    *,
    settings: Settings | None = None,
    adapter: StorageAdapter | None = None,
) -> FastAPI:
    """Build the HTTP service for one entity; `adapter` replaces the configured storage."""
    if isinstance(entity, str):
        entity = get_entity(entity)
    settings = settings or get_settings()
    if adapter is None:
        adapter = build_adapter(entity, settings)

    app = FastAPI(title=f"Forum {entity.label}s API")
    app.state.settings = settings
    app.state.entity = entity
    app.state.adapter = adapter
    app.state.record_service = RecordService(entity, adapter)

    service_name = entity.service_name

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            _error_body(str(exc.detail), service_name),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(_error_body("Invalid request body", service_name), status_code=422)

    app.include_router(build_router(entity))

    # last added runs first: CORS wraps logging, logging wraps error handling
    app.add_middleware(ErrorMiddleware, service_name=service_name)
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info("%s ready (storage: %s)", service_name, adapter.mode)
    return app


def create_posts_app() -> FastAPI:
    return create_app("posts")


def create_threads_app() -> FastAPI:
    return create_app("threads")


def create_users_app() -> FastAPI:
    return create_app("users")
