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
from sqlalchemy import text

from config.settings import settings
from src.wg_admin.api.router import router as admin_router
from src.wg_common.database import engine
from src.wg_common.errors import AppError
from src.wg_common.redis_client import close_redis, get_redis
from src.wg_common.response import error_response
from src.wg_gateway.middleware.request_log import RequestLogMiddleware
from src.wg_ledger.api.router import router as wallet_router
from src.wg_pricing.api.router import router as price_router
from src.wg_realtime.domain.events import EventPublisher
from src.wg_realtime.infrastructure.memory_bus import InMemoryEventBus
from src.wg_realtime.infrastructure.redis_bus import RedisEventBus
from src.wg_wagering.api.router import router as wager_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def build_event_bus(kind: str) -> EventPublisher:
    if kind == "redis":
        return RedisEventBus(await get_redis())
    if kind == "memory":
        return InMemoryEventBus()
    raise ValueError(f"Unknown EVENT_BUS: {kind}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, build the event bus. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    app.state.event_bus = await build_event_bus(settings.EVENT_BUS)
    logger.info("Event bus: %s", settings.EVENT_BUS)
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
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(wallet_router, prefix="/api/v1")
app.include_router(price_router, prefix="/api/v1")
app.include_router(wager_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
