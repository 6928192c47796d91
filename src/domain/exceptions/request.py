"""Caller contract violations."""

from .base import DomainException


class InvalidRequestException(DomainException):
    """Raised when a caller passes arguments no request could satisfy."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_REQUEST",
        )
