from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scorekeeper.config import settings
from scorekeeper.db import close_db
from scorekeeper.logging_config import configure_logging
from scorekeeper.middleware.logging import StructuredLoggingMiddleware
from scorekeeper.middleware.rate_limit import RateLimitMiddleware
from scorekeeper.routers import announcer, attendance, events, games, stats, teams
from scorekeeper.services.announcer import (
    AnnouncerConfigurationError,
    AnnouncerError,
    is_announcer_available,
)
from scorekeeper.services.errors import NotFoundError, StoreUnavailableError, ValidationError
from scorekeeper.services.submissions import format_pydantic_errors
from scorekeeper.validate_env import validate_env

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    validate_env()
    configure_logging(service="scorekeeper-api", environment=settings.environment, log_level=settings.log_level)
    logger.info(
        "api_startup",
        extra={"environment": settings.environment, "announcer_available": is_announcer_available()},
    )
    yield
    await close_db()


app = FastAPI(title="scorekeeper", version="1.0.0", lifespan=lifespan)

app.add_middleware(StructuredLoggingMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(games.router)
app.include_router(events.router)
app.include_router(stats.router)
app.include_router(attendance.router)
app.include_router(teams.router)
app.include_router(announcer.router)


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "validation_error", "detail": exc.errors})


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "validation_error", "detail": format_pydantic_errors(exc.errors())},
    )


@app.exception_handler(NotFoundError)
async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "not_found", "detail": str(exc)})


@app.exception_handler(StoreUnavailableError)
async def handle_store_unavailable(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.warning(
        "store_unavailable",
        extra={"method": request.method, "path": request.url.path, "operation": exc.operation},
    )
    return JSONResponse(
        status_code=503,
        content={
            "error": "store_unavailable",
            "detail": str(exc),
            "retryAfterSeconds": exc.retry_after_seconds,
        },
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


@app.exception_handler(AnnouncerError)
async def handle_announcer_error(request: Request, exc: AnnouncerError) -> JSONResponse:
    if isinstance(exc, AnnouncerConfigurationError):
        return JSONResponse(status_code=503, content={"error": "announcer_unconfigured", "detail": str(exc)})
    return JSONResponse(status_code=502, content={"error": "announcer_failed", "detail": str(exc)})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error", extra={"method": request.method, "path": request.url.path})
    return JSONResponse(status_code=500, content={"error": "server_error"})


@app.get("/healthz")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
