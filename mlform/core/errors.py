"""mlform – Error types.

Raised where the problem is detected, mapped to HTTP responses only in the gateway.
"""


class MLFormError(Exception):
    """Base class for all multi-locale form errors."""


class LockerIntegrityError(MLFormError):
    """The submission cannot be reconciled, e.g. the base locale overrides are missing."""

    def __init__(self, message: str, *, locale: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.locale = locale
        self.field = field


class WidgetUsageError(MLFormError):
    """The client called a widget handler without the data it requires."""
