# backend/app/routes/v1/health.py
"""
Health check endpoints for monitoring and load balancer probes.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Response

from app.api.dependencies.services import get_catalog_store
from app.core.config import settings
from app.core.constants import API_VERSION
from app.schemas.health import HealthResponse
from app.services.catalog import CatalogStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("", response_model=HealthResponse)
def health_check(
    response: Response, store: CatalogStore = Depends(get_catalog_store)
) -> HealthResponse:
    """
    Health check endpoint.

    Returns service info, the environment and how much of the festival
    catalog is loaded.
    """
    if settings.is_testing:
        response.headers["X-Testing"] = "1"
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        catalog=store.size,
    )
