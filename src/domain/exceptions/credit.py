"""Credit ledger exceptions."""

from .base import DomainException


class ConcurrentCreditUpdateException(DomainException):
    """Raised when a credit state write loses an optimistic version check."""

    retryable = True

    def __init__(self, user_id: str, expected_version: int):
        super().__init__(
            message=(
                f"Credit state for {user_id} changed concurrently "
                f"(expected version {expected_version})"
            ),
            code="CREDIT_STATE_CONFLICT",
        )
        self.user_id = user_id
        self.expected_version = expected_version
