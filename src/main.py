"""FastAPI application entry point.

Run with: uvicorn src.main:app --port 8080
      or: python -m src.main   (binds SERVER_HOST:SERVER_PORT from settings)
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import Settings, settings
from src.ccy_common.database import create_db_engine, create_session_factory
from src.ccy_common.errors import AppError
from src.ccy_common.redis_client import close_redis, create_redis
from src.ccy_common.response import error_response
from src.ccy_currency.api.router import router as currency_router
from src.ccy_currency.application.service import CurrencyApplicationService
from src.ccy_currency.infrastructure.persistence import CurrencyRepository
from src.ccy_currency.infrastructure.redis_cache import RedisKeyValueCache
from src.ccy_gateway.middleware.request_log import RequestLogMiddleware

VERSION = "0.1.0"
SERVICE_NAME = "currency-api"

logger = logging.getLogger(__name__)


def _error_json(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(error, message).model_dump(exclude_none=True),
    )


def create_app(cfg: Settings = settings) -> FastAPI:
    logging.basicConfig(
        level=cfg.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: verify DB + Redis connections. Shutdown: dispose."""
        engine = create_db_engine(cfg)
        redis = create_redis(cfg)
        cache = RedisKeyValueCache(redis)
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        await cache.ping()

        app.state.session_factory = create_session_factory(engine)
        app.state.currency_service = CurrencyApplicationService(
            repo=CurrencyRepository(),
            cache=cache,
        )
        logger.info("%s started (db=%s, redis=%s)", cfg.APP_NAME, cfg.DB_HOST, cfg.REDIS_ADDR)
        yield
        await engine.dispose()
        await close_redis(redis)
        logger.info("%s stopped", cfg.APP_NAME)

    app = FastAPI(
        title=cfg.APP_NAME,
        version=VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.http_status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
            detail = exc.message if cfg.DEBUG else None
            return _error_json(exc.http_status, "Internal server error", detail)
        return _error_json(exc.http_status, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return _error_json(400, "Invalid request", detail)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_json(500, "Internal server error", str(exc) if cfg.DEBUG else None)

    app.include_router(currency_router, prefix="/api/v1")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "service": SERVICE_NAME,
            "version": VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.SERVER_HOST, port=settings.SERVER_PORT, loop="uvloop")
