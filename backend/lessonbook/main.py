# backend/lessonbook/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI

from .core.config import is_running_tests, settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_V1_PREFIX, API_VERSION, BRAND_NAME
from .errors import register_error_handlers
from .routes.v1 import (
    bookings as bookings_v1,
    health as health_v1,
    notifications as notifications_v1,
    prometheus as prometheus_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment} (storage={settings.storage_backend})")

    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    if settings.storage_backend == "sql" and settings.is_sqlite:
        # Local SQLite has no migrations applied; PostgreSQL is managed by alembic
        from .database import init_db

        init_db()
        logger.info("SQLite schema ensured")

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


def create_app() -> FastAPI:
    """Build the application with error handlers and v1 routes mounted."""
    application = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )
    register_error_handlers(application)

    api_v1 = APIRouter(prefix=API_V1_PREFIX)
    api_v1.include_router(bookings_v1.router, prefix="/bookings")
    api_v1.include_router(notifications_v1.router, prefix="/notifications")
    application.include_router(api_v1)

    # Probes stay outside the versioned prefix
    application.include_router(health_v1.router)
    application.include_router(prometheus_v1.router)
    return application


app = create_app()
