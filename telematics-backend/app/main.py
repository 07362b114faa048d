"""
Entry point for the telematics alert backend.

This script creates the FastAPI application, includes all API routers,
and prepares the database on startup. Run with:

    uvicorn app.main:app --reload

"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from .api import api_router
from .core.config import get_app_env
from .core.db import engine
from .core.errors import log_exception
from .models import Base
from .scripts.run_migrations import run_migrations_to_head


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(title="Telematics Alert Backend", version="0.1.0")
    # Include API routers
    app.include_router(api_router)

    # Ensure tables exist for local use
    @app.on_event("startup")
    def _init_db() -> None:
        logger = logging.getLogger("startup")
        env = get_app_env()
        if os.getenv("AUTO_CREATE_DB", "true").lower() in {"1", "true", "yes"}:
            try:
                Base.metadata.create_all(bind=engine)
            except Exception as exc:
                log_exception(logger, "DB create_all failed", exc=exc)
                if env == "prod":
                    raise
        if os.getenv("AUTO_RUN_MIGRATIONS", "true").lower() in {"1", "true", "yes"}:
            try:
                run_migrations_to_head()
            except Exception as exc:
                log_exception(logger, "DB migrations failed", exc=exc)
                if env == "prod":
                    raise
        logger.info("Telematics alert backend started env=%s", env)

    return app


app = create_app()
