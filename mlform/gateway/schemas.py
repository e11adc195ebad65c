"""mlform – Gateway request/response schemas."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SwitchLocaleRequest(BaseModel):
    """Locale switch request sent by the locale selector."""

    model_config = ConfigDict(populate_by_name=True)

    target_locale: str | None = Field(default=None, alias="targetLocale", description="Locale to show next")
    previous_locale: str | None = Field(default=None, alias="previousLocale", description="Locale being left")
    post: dict[str, Any] = Field(default_factory=dict, description="Current form post, nested or bracket-named")


class SaveRequest(BaseModel):
    """Form submission for one multi-locale field."""

    post: dict[str, Any] = Field(default_factory=dict, description="Form post, nested or bracket-named")


class SaveResponse(BaseModel):
    value: Any = Field(..., description="Persisted base locale value")
    translations: dict[str, Any] = Field(default_factory=dict, description="Reconciled trees of the other locales")


class StoredField(BaseModel):
    """Persisted state of one field."""

    value: Any = None
    translations: dict[str, Any] = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
