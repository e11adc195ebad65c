"""mlform – Application Configuration.

Pydantic Settings, loaded from .env file or environment variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Gateway ---
    environment: str = "development"
    log_level: str = "info"
    gateway_host: str = "0.0.0.0"
    gateway_port: int = 8000

    # --- Locales ---
    base_locale: str = "en"
    available_locales: str = "en,fr"  # comma separated
    translate_enabled: bool = True

    # --- Transport field names ---
    overrides_namespace: str = "MLTranslate"
    overrides_widget_key: str = "mlnf"
    locale_marker_namespace: str = "MLTranslateNestedFormLocale"

    @property
    def locales(self) -> list[str]:
        """Configured locale codes, base locale always included."""
        codes = [code.strip() for code in (self.available_locales or "").split(",") if code.strip()]
        if self.base_locale not in codes:
            codes.insert(0, self.base_locale)
        return codes

    @property
    def translation_available(self) -> bool:
        return self.translate_enabled and len(self.locales) > 1


def get_settings() -> Settings:
    """Factory function for settings singleton."""
    return Settings()
