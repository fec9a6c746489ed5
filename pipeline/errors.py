"""Errors raised while answering a lead search."""


class LeadSearchError(Exception):
    """Base exception for all lead search errors."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, detail=None):
        super().__init__(detail or self.message)
        self.detail = detail or self.message


class InvalidRequest(LeadSearchError):
    """Raised when the caller omits area or category."""

    status_code = 400
    message = "Area and category are required"


class ConfigurationError(LeadSearchError):
    """Raised when the service is misconfigured (API key, registry, filter)."""

    message = "Server configuration error"


class UpstreamError(LeadSearchError):
    """Raised when the places provider is unreachable or returns garbage."""

    message = "Failed to fetch places"
