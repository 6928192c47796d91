"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .bank import (
    BankAPIException,
    BankAPITimeoutException,
    UserNotFoundException,
)
from .credit import ConcurrentCreditUpdateException
from .enrichment import (
    EnrichmentException,
    EnrichmentResponseException,
    EnrichmentTimeoutException,
    EnrichmentUnavailableException,
)
from .request import InvalidRequestException
from .store import OperationTimeoutException, StoreUnavailableException

__all__ = [
    "DomainException",
    "BankAPIException",
    "BankAPITimeoutException",
    "UserNotFoundException",
    "ConcurrentCreditUpdateException",
    "EnrichmentException",
    "EnrichmentResponseException",
    "EnrichmentTimeoutException",
    "EnrichmentUnavailableException",
    "InvalidRequestException",
    "OperationTimeoutException",
    "StoreUnavailableException",
]
