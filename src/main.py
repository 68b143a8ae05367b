"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.bo_binary.api.router import router as binary_order_router
from src.bo_binary.application.scheduler import SettlementScheduler
from src.bo_binary.application.service import BinaryOrderService
from src.bo_binary.application.sweep import SweepRunner
from src.bo_binary.domain.outcome import ProfitConfig
from src.bo_common.database import async_session_factory, check_database, engine
from src.bo_common.errors import AppError
from src.bo_common.redis_client import close_redis, get_redis
from src.bo_common.response import error_response
from src.bo_exchange.application.ban_gate import BanGate
from src.bo_exchange.application.exchange_manager import ExchangeManager
from src.bo_exchange.infrastructure.ccxt_feed import CcxtPriceFeed, create_exchange
from src.bo_gateway.middleware.request_log import RequestLogMiddleware
from src.bo_notification.application.service import NotificationService


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, wire the order engine, re-arm timers. Shutdown: tear down."""
    await check_database()
    redis = await get_redis()

    ban_gate = BanGate(redis)
    feed = CcxtPriceFeed(create_exchange(settings), ban_gate)
    exchange = ExchangeManager(
        feed.connect,
        attempts=settings.EXCHANGE_CONNECT_ATTEMPTS,
        backoff_ms=settings.EXCHANGE_CONNECT_BACKOFF_MS,
    )
    scheduler = SettlementScheduler()
    service = BinaryOrderService(
        session_factory=async_session_factory,
        exchange=exchange,
        ban_gate=ban_gate,
        scheduler=scheduler,
        notifier=NotificationService(redis, async_session_factory),
        profit_config=ProfitConfig.from_settings(settings),
    )
    app.state.binary_order_service = service
    await service.reschedule_pending()

    sweep = SweepRunner(service, settings.BINARY_SWEEP_INTERVAL_SECONDS)
    if settings.BINARY_SWEEP_ENABLED:
        sweep.start()

    yield

    await sweep.stop()
    await scheduler.shutdown()
    await exchange.close()
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
    resp = error_response(
        exc.code, exc.message, exc.http_status, getattr(request.state, "request_id", None)
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(binary_order_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
