"""
Prometheus metrics endpoint.

Public, like any scrape target. Exposes HTTP request metrics from the
middleware, service operation metrics from @measure_operation, and the
login / planner counters.
"""

from fastapi import APIRouter, Request, Response
from prometheus_client import Counter

from app.monitoring.prometheus_metrics import REGISTRY, PrometheusMetrics, prometheus_metrics

router = APIRouter(tags=["monitoring"])

_scrape_counter = Counter(
    "archive_prometheus_scrapes_total",
    "Total number of Prometheus metrics scrapes",
    registry=REGISTRY,
)


@router.get("/prometheus", include_in_schema=False, response_class=Response, response_model=None)
async def get_prometheus_metrics(request: Request) -> Response:
    """
    Expose Prometheus metrics for scraping.

    ``?refresh=1`` bypasses the one-second payload cache.
    """
    _scrape_counter.inc()
    if request.query_params.get("refresh", "").lower() in {"1", "true", "yes"}:
        PrometheusMetrics._invalidate_cache()

    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )
