from __future__ import annotations


class GlucoseApiError(Exception):
    """Base class for failures raised by the forecast services."""


class ValidationError(GlucoseApiError):
    """Caller input is missing or malformed."""


class ProviderError(GlucoseApiError):
    """The completion provider could not be reached or answered with an error."""


class ParseError(GlucoseApiError):
    """Provider text could not be read as the expected number or JSON object."""


class ErrorResponse(Exception):
    """Public failure rendered by the app as ``{field: message}``."""

    def __init__(self, status_code: int, message: str, field: str = "error"):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.field = field
