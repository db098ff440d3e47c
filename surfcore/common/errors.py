"""Package exceptions and failure typing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from surfcore.errors.taxonomy import NormalizedError


class SurfCoreError(Exception):
    """Base class for surfcore failures."""

    error_code = "SURFCORE_ERROR"


class ConfigError(SurfCoreError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ApiRequestError(SurfCoreError):
    """Raised when an API call fails; carries the classified error."""

    error_code = "API_REQUEST_ERROR"

    def __init__(self, error: NormalizedError) -> None:
        super().__init__(error.technical_details)
        self.error = error

    @property
    def code(self) -> str:
        return self.error.code
