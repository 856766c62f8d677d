"""Uden API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map UdenError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Settings loaded once; database initialized and disposed by the lifespan
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uden.api.error_handlers import register_error_handlers
from uden.api.routes import auth, billing, health, user
from uden.config import get_settings
from uden.infrastructure import database
from uden.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Uden API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("Uden API shutting down")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Uden API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(billing.router)
    app.include_router(user.router)

    register_error_handlers(app)
    return app


app = create_app()
