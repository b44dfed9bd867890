from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import feature_states, features, flagd, health
from app.core.config import Settings, get_settings
from app.core.logging import setup_logging
from app.db.migrations import apply_migrations
from app.db.pool import close_pool, create_pool
from app.flags.errors import FlagServiceError
from app.flags.pg_store import PostgresFlagStore
from app.flags.store import FlagStore

logger = logging.getLogger(__name__)


def _make_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting flag service")
        pool = None
        if getattr(app.state, "flag_store", None) is None:
            pool = await create_pool(settings)
            if settings.run_migrations:
                applied = await apply_migrations(pool)
                logger.info("Migration done (%d applied)", len(applied))
            app.state.flag_store = PostgresFlagStore(pool)

        try:
            yield
        finally:
            await close_pool(pool)
            logger.info("Flag service stopped")

    return lifespan


async def flag_service_error_handler(request: Request, exc: FlagServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=exc.status_code)


def create_app(settings: Settings | None = None, store: FlagStore | None = None) -> FastAPI:
    """
    Собирает приложение.

    Если store передан, он используется как есть и пул БД не создаётся.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, json_output=settings.log_json)

    app = FastAPI(title="Flag Service", lifespan=_make_lifespan(settings))
    app.state.flag_store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type"],
    )
    app.add_exception_handler(FlagServiceError, flag_service_error_handler)

    api_prefix = settings.api_prefix
    app.include_router(health.router, prefix=api_prefix)
    app.include_router(features.router, prefix=api_prefix)
    app.include_router(feature_states.router, prefix=api_prefix)
    app.include_router(flagd.router, prefix=api_prefix)
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
