# backend/lessonbook/routes/v1/health.py
"""
Health check endpoint for monitoring and load balancer probes.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging

from fastapi import APIRouter
from pydantic import BaseModel

from ...core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
    storage_backend: str
    timestamp: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe; does not touch the store."""
    return HealthResponse(
        status="healthy",
        service="lessonbook-api",
        environment=settings.environment,
        storage_backend=settings.storage_backend,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
