# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from .core.config import is_running_tests, settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes.v1 import (
    account as account_v1,
    auth as auth_v1,
    catalog as catalog_v1,
    favorite_screenings as favorite_screenings_v1,
    health as health_v1,
    planner as planner_v1,
    privacy as privacy_v1,
    prometheus as prometheus_v1,
    reviews as reviews_v1,
    timetable as timetable_v1,
    user_entries as user_entries_v1,
    users as users_v1,
)
from .schemas.health import RootResponse
from .services.catalog import get_catalog

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _warm_catalog() -> None:
    """Load the festival catalog once so the first request does not pay for it."""
    try:
        store = get_catalog()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Festival catalog could not be loaded from {settings.catalog_path}: {e}")
        return
    logger.info(f"Festival catalog loaded: {store.size}")


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    init_db()
    _warm_catalog()

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(route.methods or [])).lower()
    path = route.path_format.strip("/").replace("/", "_").replace("{", "").replace("}", "")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)

# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s allow_credentials=%s", settings.cors_origins, True)

app.add_middleware(PrometheusMiddleware)  # Prometheus metrics with SSE bypass

api_v1 = APIRouter(prefix="/api/v1")

api_v1.include_router(health_v1.router, prefix="/health")
api_v1.include_router(auth_v1.router, prefix="/auth")
api_v1.include_router(account_v1.router, prefix="/account")
api_v1.include_router(catalog_v1.router, prefix="/catalog")
api_v1.include_router(favorite_screenings_v1.router, prefix="/favorite-screenings")
api_v1.include_router(timetable_v1.router, prefix="/timetable")
api_v1.include_router(user_entries_v1.router, prefix="/user-entries")
api_v1.include_router(reviews_v1.router, prefix="/reviews")
api_v1.include_router(privacy_v1.router, prefix="/privacy")
api_v1.include_router(users_v1.router, prefix="/users")
api_v1.include_router(planner_v1.router, prefix="/planner")
api_v1.include_router(prometheus_v1.router, prefix="/metrics")

app.include_router(api_v1)


@app.get("/", response_model=RootResponse)
def read_root() -> RootResponse:
    """Root endpoint - API information"""
    return RootResponse(
        message=f"Welcome to the {BRAND_NAME} API!",
        version=API_VERSION,
        docs="/docs",
        environment=settings.environment,
    )
