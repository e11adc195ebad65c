"""mlform – Logging and Prometheus metrics."""

import logging
import time
from typing import Callable

import structlog
from fastapi import APIRouter, FastAPI, Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)

from config.settings import get_settings

router = APIRouter(tags=["monitoring"])

REQUEST_COUNT = Counter(
    "mlform_http_requests_total",
    "Total HTTP requests by method, endpoint and status",
    ["method", "endpoint", "status"],
)

REQUEST_LATENCY = Histogram(
    "mlform_http_request_duration_seconds",
    "HTTP request latency by method and endpoint",
    ["method", "endpoint"],
)

LOCALE_SWITCH_COUNT = Counter(
    "mlform_locale_switches_total",
    "Locale switches by target locale and outcome",
    ["locale", "status"],
)

SAVE_COUNT = Counter(
    "mlform_field_saves_total",
    "Field saves by outcome",
    ["status"],
)


@router.get("/metrics")
def metrics():
    """Expose Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def setup_logging(level: str | None = None) -> None:
    """Configure structlog for JSON output."""
    level_name = (level or get_settings().log_level or "info").upper()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_instrumentation(app: FastAPI) -> None:
    """Configure logging and attach the request metrics middleware."""
    setup_logging()

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        path = request.url.path
        status = "500"

        try:
            response = await call_next(request)
            status = str(response.status_code)
        finally:
            duration = time.time() - start_time
            REQUEST_COUNT.labels(method=request.method, endpoint=path, status=status).inc()
            REQUEST_LATENCY.labels(method=request.method, endpoint=path).observe(duration)

        return response
