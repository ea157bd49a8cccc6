"""Game server status API: main application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from gamestatus import config
from gamestatus.analytics_db import AnalyticsStore
from gamestatus.cache import RedisStatusCache, build_status_cache
from gamestatus.log_redact import install_log_redaction
from gamestatus.models import ErrorMessagesResponse, ServerStatus
from gamestatus.services import build_querier
from gamestatus.status_service import ServiceError, ServiceErrorKind, StatusService

# --- Logging ---
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
install_log_redaction()
logger = logging.getLogger("gamestatus.api")


def build_status_service() -> StatusService:
    return StatusService(
        cache=build_status_cache(config.REDIS_URL),
        querier=build_querier(config.QUERY_GAME_TYPE),
        ttl_seconds=config.STATUS_CACHE_TTL_SECONDS,
        query_timeout=config.QUERY_TIMEOUT_SECONDS,
        single_flight=config.STATUS_SINGLE_FLIGHT,
    )


@asynccontextmanager
async def _lifespan(app: FastAPI):
    service = build_status_service()
    app.state.status_service = service
    app.state.analytics_store = AnalyticsStore(config.ANALYTICS_DB_PATH)
    logger.info(
        "Status service ready cache=%s game=%s ttl=%ds timeout=%.1fs single_flight=%s",
        service.cache.__class__.__name__,
        config.QUERY_GAME_TYPE,
        config.STATUS_CACHE_TTL_SECONDS,
        config.QUERY_TIMEOUT_SECONDS,
        config.STATUS_SINGLE_FLIGHT,
    )
    try:
        yield
    finally:
        if isinstance(service.cache, RedisStatusCache):
            await service.cache.close()


# --- App ---
app = FastAPI(
    title="gamestatus",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=_lifespan,
)

if config.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
    )

# --- Include analytics router ---
from gamestatus.routers.analytics import router as analytics_router  # noqa: E402
app.include_router(analytics_router)


def get_status_service(request: Request) -> StatusService:
    return request.app.state.status_service


@app.get("/server", response_model=ServerStatus, response_model_by_alias=True)
async def get_server(
    ip: Optional[str] = Query(default=None),
    port: Optional[str] = Query(default=None),
    service: StatusService = Depends(get_status_service),
):
    try:
        return await service.get_status(ip, port)
    except ServiceError as exc:
        if exc.kind is ServiceErrorKind.INVALID_INPUT:
            body = ErrorMessagesResponse(errorMessages=exc.field_errors)
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=body.model_dump(mode="json", by_alias=True),
            )
        return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
