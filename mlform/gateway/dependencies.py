"""Shared dependencies for the gateway routes.

Avoids circular imports by centralizing singleton initialization.
"""

import threading
from typing import Any

import structlog

from config.settings import get_settings
from mlform.gateway.schemas import StoredField
from mlform.widgets.ml_nested_form import MLNestedForm
from mlform.widgets.templating import WidgetTemplateEngine, get_engine

logger = structlog.get_logger()
settings = get_settings()


class FieldStore:
    """In-process storage of persisted field values, keyed by model and field."""

    def __init__(self) -> None:
        self._fields: dict[tuple[str, str], StoredField] = {}
        self._lock = threading.Lock()

    def get(self, model: str, field: str) -> StoredField:
        with self._lock:
            return self._fields.get((model, field)) or StoredField()

    def save(self, model: str, field: str, value: Any, translations: dict[str, Any] | None = None) -> StoredField:
        stored = StoredField(value=value, translations=translations or {})
        with self._lock:
            self._fields[(model, field)] = stored
        logger.info("field_store.saved", model=model, field=field, locales=list(stored.translations))
        return stored

    def clear(self) -> None:
        with self._lock:
            self._fields.clear()


# Initialize Singletons
field_store = FieldStore()


def get_field_store() -> FieldStore:
    return field_store


def build_widget(
    model: str,
    field: str,
    *,
    store: FieldStore | None = None,
    engine: WidgetTemplateEngine | None = None,
) -> MLNestedForm:
    """Instantiate the widget for one request from the stored field state."""
    stored = (store or field_store).get(model, field)
    return MLNestedForm(
        field,
        model,
        stored.value,
        translations=stored.translations,
        settings=settings,
        engine=engine or get_engine(),
    )
