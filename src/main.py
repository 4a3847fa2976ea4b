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
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text

from config.settings import Settings, settings
from src.ct_common import id_generator
from src.ct_common.database import build_engine, build_session_factory
from src.ct_common.errors import AppError, InternalError
from src.ct_common.redis_client import build_redis, close_redis
from src.ct_common.response import error_response
from src.ct_common.transaction import TransactionCoordinator
from src.ct_contract.api.router import router as contract_router
from src.ct_dispute.api.router import router as dispute_router
from src.ct_gateway.api.router import router as me_router
from src.ct_gateway.middleware.request_log import RequestLogMiddleware
from src.ct_hire.api.router import router as hire_router
from src.ct_lifecycle.api.router import router as lifecycle_router
from src.ct_notification.api.router import router as notification_router
from src.ct_notification.application.publisher import NotificationPublisher
from src.ct_order.api.router import router as order_router
from src.ct_wallet.api.router import router as wallet_router

logger = logging.getLogger(__name__)


def _validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({"field": ".".join(loc) or "request", "message": str(err.get("msg", ""))})
    return details


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build the engine, session factory, coordinator and publisher, then the app."""
    id_generator.configure(app_settings.SNOWFLAKE_MACHINE_ID)
    engine = build_engine(app_settings)
    coordinator = TransactionCoordinator(build_session_factory(engine))
    redis = build_redis(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: verify DB, probe Redis. Shutdown: dispose."""
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        try:
            await redis.ping()
        except (RedisError, OSError) as exc:
            logger.warning("Redis unavailable at startup, live notifications disabled: %s", exc)
        yield
        await engine.dispose()
        await close_redis(redis)

    app = FastAPI(
        title=app_settings.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.coordinator = coordinator
    app.state.publisher = NotificationPublisher(redis)

    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        resp = error_response(exc.code, exc.message, exc.details)
        return JSONResponse(
            status_code=exc.http_status,
            content=resp.model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        resp = error_response(7001, "Validation failed", _validation_details(exc))
        return JSONResponse(status_code=422, content=resp.model_dump())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        internal = InternalError()
        resp = error_response(internal.code, internal.message)
        return JSONResponse(status_code=internal.http_status, content=resp.model_dump())

    app.include_router(me_router, prefix="/api/v1")
    app.include_router(hire_router, prefix="/api/v1")
    app.include_router(contract_router, prefix="/api/v1")
    app.include_router(order_router, prefix="/api/v1")
    app.include_router(lifecycle_router, prefix="/api/v1")
    app.include_router(wallet_router, prefix="/api/v1")
    app.include_router(dispute_router, prefix="/api/v1")
    app.include_router(notification_router, prefix="/api/v1")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": "0.1.0"}

    return app


app = create_app(settings)
