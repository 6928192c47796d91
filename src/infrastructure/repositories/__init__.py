"""Repository implementations."""

from .credit_state_repository import PostgresCreditStateRepository
from .transaction_batch_repository import PostgresTransactionBatchRepository
from .vendor_cache_repository import PostgresVendorCacheRepository

__all__ = [
    "PostgresCreditStateRepository",
    "PostgresTransactionBatchRepository",
    "PostgresVendorCacheRepository",
]
