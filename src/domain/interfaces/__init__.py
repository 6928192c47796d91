"""
Domain Interfaces (Ports)
"""

from .repositories import (
    CreditStateRepository,
    TransactionBatchRepository,
    VendorCacheRepository,
)
from .clients import (
    BankAPIClient,
    EnrichmentClient,
    EnrichmentResponse,
    EnrichmentResult,
    EnrichmentStub,
)

__all__ = [
    "CreditStateRepository",
    "TransactionBatchRepository",
    "VendorCacheRepository",
    "BankAPIClient",
    "EnrichmentClient",
    "EnrichmentResponse",
    "EnrichmentResult",
    "EnrichmentStub",
]
