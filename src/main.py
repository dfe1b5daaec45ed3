"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from config.settings import settings
from src.bt_admin.api.router import router as admin_router
from src.bt_common.database import engine, ping_database
from src.bt_common.errors import AppError, ServiceUnavailableError
from src.bt_common.redis_client import close_redis, ping_redis
from src.bt_common.response import error_response_for
from src.bt_gateway.api.router import router as auth_router
from src.bt_gateway.middleware.request_log import RequestLogMiddleware
from src.bt_listing.api.router import favorites_router
from src.bt_listing.api.router import router as listing_router
from src.bt_messaging.api.router import messages_router
from src.bt_messaging.api.router import router as conversation_router
from src.bt_moderation.api.router import router as moderation_router
from src.bt_notification.api.router import router as notification_router
from src.bt_review.api.router import router as review_router
from src.bt_trade.api.router import exchange_router, proposals_router, trades_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (and Redis when it backs the abuse counters). Shutdown: dispose."""
    await ping_database()
    await ping_redis()
    logger.info(
        "%s started (abuse counters: %s)", settings.APP_NAME, settings.ABUSE_COUNTER_BACKEND
    )
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response_for(exc, getattr(request.state, "request_id", None))
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


@app.exception_handler(OperationalError)
@app.exception_handler(RedisConnectionError)
async def backend_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Backend unavailable on %s %s: %s", request.method, request.url.path, exc)
    err = ServiceUnavailableError()
    return JSONResponse(
        status_code=err.http_status,
        content=error_response_for(err, getattr(request.state, "request_id", None)).model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(listing_router, prefix="/api/v1")
app.include_router(favorites_router, prefix="/api/v1")
app.include_router(proposals_router, prefix="/api/v1")
app.include_router(exchange_router, prefix="/api/v1")
app.include_router(trades_router, prefix="/api/v1")
app.include_router(conversation_router, prefix="/api/v1")
app.include_router(messages_router, prefix="/api/v1")
app.include_router(notification_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")
app.include_router(review_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
