"""Entrypoint for the coin ledger FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .api.errors import register_error_handlers
from .api.routes import api_router
from .config import get_settings
from .core.logging import setup_logging
from .core.telemetry import setup_telemetry
from .db.session import Database, get_database

logger = logging.getLogger("coinledger")


@asynccontextmanager
async def _lifespan(app: FastAPI, db: Database):
    await db.create_all()
    yield


def create_app(db: Database | None = None) -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    database_instance = db or get_database()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lambda app: _lifespan(app, database_instance),
    )
    app.state.database = database_instance
    register_error_handlers(app)
    setup_telemetry(app, settings, database_instance.engine)
    logger.info("Coin ledger configuration: %s", settings.dict_for_logging())

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["system"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "service": "coinledger", "database": database_instance.engine.dialect.name}

    return app


app = create_app()
