"""mlform – Gateway.

HTTP surface of the multi-locale nested form widget: render, locale switch
and save handlers, plus health and metrics.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from config.settings import get_settings
from mlform.core.errors import LockerIntegrityError, WidgetUsageError
from mlform.core.instrumentation import LOCALE_SWITCH_COUNT, SAVE_COUNT, setup_instrumentation
from mlform.core.instrumentation import router as metrics_router
from mlform.core.submission import expand_brackets
from mlform.gateway.dependencies import FieldStore, build_widget, get_field_store
from mlform.gateway.schemas import SaveRequest, SaveResponse, SwitchLocaleRequest

logger = structlog.get_logger()

SERVICE_NAME = "mlform-gateway"
VERSION = "1.0.0"

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "gateway.startup",
        environment=settings.environment,
        base_locale=settings.base_locale,
        locales=settings.locales,
    )
    yield
    logger.info("gateway.shutdown")


app = FastAPI(title="mlform gateway", version=VERSION, lifespan=lifespan)
setup_instrumentation(app)
app.include_router(metrics_router)


def _normalize_post(post: dict[str, Any]) -> dict[str, Any]:
    """Accept both nested posts and flat bracket-named form keys."""
    if any("[" in key for key in post):
        return expand_brackets(post)
    return post


def _locale_label(locale: str | None) -> str:
    """Metric label for a requested locale; unknown codes share one bucket."""
    locale = (locale or "").strip()
    return locale if locale in settings.locales else "other"


@app.exception_handler(WidgetUsageError)
async def widget_usage_error_handler(request: Request, exc: WidgetUsageError) -> JSONResponse:
    logger.warning("gateway.widget_usage_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(LockerIntegrityError)
async def locker_integrity_error_handler(request: Request, exc: LockerIntegrityError) -> JSONResponse:
    logger.error(
        "gateway.locker_integrity_error",
        path=request.url.path,
        locale=exc.locale,
        field=exc.field,
        error=str(exc),
    )
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
async def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/forms/{model}/{field}", response_class=HTMLResponse)
async def render_field(model: str, field: str, store: FieldStore = Depends(get_field_store)) -> HTMLResponse:
    """Render the widget from the stored field value."""
    widget = build_widget(model, field, store=store)
    return HTMLResponse(widget.render())


@app.post("/forms/{model}/{field}/switch-locale")
async def switch_locale(
    model: str,
    field: str,
    payload: SwitchLocaleRequest,
    store: FieldStore = Depends(get_field_store),
) -> dict[str, Any]:
    """Rebuild the items for the requested locale."""
    widget = build_widget(model, field, store=store)
    submission = widget.submission_from_post(_normalize_post(payload.post))
    locale_label = _locale_label(payload.target_locale)
    try:
        result = widget.on_switch_item_locale(payload.target_locale, payload.previous_locale, submission)
    except (WidgetUsageError, LockerIntegrityError):
        LOCALE_SWITCH_COUNT.labels(locale=locale_label, status="error").inc()
        raise
    LOCALE_SWITCH_COUNT.labels(locale=locale_label, status="ok").inc()
    return result


@app.post("/forms/{model}/{field}/save", response_model=SaveResponse)
async def save_field(
    model: str,
    field: str,
    payload: SaveRequest,
    store: FieldStore = Depends(get_field_store),
) -> SaveResponse:
    """Reconcile the submission and persist the base locale value."""
    widget = build_widget(model, field, store=store)
    submission = widget.submission_from_post(_normalize_post(payload.post))
    try:
        value = widget.get_save_value(submission)
        locker = widget.get_locale_save_data(submission)
    except LockerIntegrityError:
        SAVE_COUNT.labels(status="error").inc()
        raise

    translations = {
        locale: tree.to_data() for locale, tree in locker.items() if locale != submission.base_locale
    }
    stored = store.save(model, field, value.to_data(), translations)
    SAVE_COUNT.labels(status="ok").inc()
    return SaveResponse(value=stored.value, translations=stored.translations)


def run() -> None:
    """Serve the gateway with uvicorn using the configured host and port."""
    uvicorn.run(
        app,
        host=settings.gateway_host,
        port=settings.gateway_port,
        log_level=settings.log_level.lower(),
    )
