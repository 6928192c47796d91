"""Durable store and timeout exceptions."""

from .base import DomainException


class StoreUnavailableException(DomainException):
    """Raised when the durable store cannot be reached."""

    retryable = True

    def __init__(self, operation: str, detail: str = ""):
        message = f"Store unavailable during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message=message, code="STORE_UNAVAILABLE")
        self.operation = operation


class OperationTimeoutException(DomainException):
    """Raised when a single attempt of a short store operation runs too long."""

    retryable = True

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            message=f"{operation} timed out after {timeout:.2f}s",
            code="OPERATION_TIMEOUT",
        )
        self.operation = operation
        self.timeout = timeout
