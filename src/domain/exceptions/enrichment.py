"""Enrichment provider exceptions."""

from .base import DomainException


class EnrichmentException(DomainException):
    """Base class for enrichment provider failures."""

    def __init__(self, message: str, code: str = "ENRICHMENT_ERROR"):
        super().__init__(message=message, code=code)


class EnrichmentUnavailableException(EnrichmentException):
    """Raised on connection errors, rate limiting and 5xx responses."""

    retryable = True

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message=message, code="ENRICHMENT_UNAVAILABLE")
        self.status_code = status_code


class EnrichmentTimeoutException(EnrichmentException):
    """Raised when the batched enrichment call exceeds its timeout."""

    def __init__(self, timeout: float):
        super().__init__(
            message=f"Enrichment call timed out after {timeout:.0f}s",
            code="ENRICHMENT_TIMEOUT",
        )
        self.timeout = timeout


class EnrichmentResponseException(EnrichmentException):
    """Raised when the provider returns a payload that fails validation."""

    def __init__(self, message: str):
        super().__init__(message=message, code="ENRICHMENT_INVALID_RESPONSE")
