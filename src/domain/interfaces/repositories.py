"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.entities import CreditState, TransactionBatch, VendorAnalysis


class VendorCacheRepository(ABC):
    """
    Key-value access to cached vendor analyses.

    The cache is shared across all users and keyed by normalized
    merchant name. Writes replace the whole entry.
    """

    @abstractmethod
    async def get(self, vendor_key: str) -> Optional[VendorAnalysis]:
        """
        Retrieve the cached analysis for a vendor key.

        Args:
            vendor_key: Normalized merchant key

        Returns:
            The cache entry if present, None otherwise
        """
        ...

    @abstractmethod
    async def upsert(self, entry: VendorAnalysis) -> VendorAnalysis:
        """
        Insert or wholesale-replace the entry for ``entry.vendor_key``.

        Args:
            entry: The analysis to store

        Returns:
            The stored entry
        """
        ...


class CreditStateRepository(ABC):
    """
    Document access to per-user credit state.
    """

    @abstractmethod
    async def get(self, user_id: str) -> Optional[CreditState]:
        """
        Retrieve a user's credit state.

        Args:
            user_id: The user's identifier

        Returns:
            The credit state if it exists, None otherwise
        """
        ...

    @abstractmethod
    async def create(self, state: CreditState) -> CreditState:
        """
        Persist a new credit state at version 0.

        Raises:
            ConcurrentCreditUpdateException: If another writer created it first
        """
        ...

    @abstractmethod
    async def save(self, state: CreditState, expected_version: int) -> CreditState:
        """
        Persist a credit state if the stored version still matches.

        Args:
            state: The new state
            expected_version: Version read before the change

        Returns:
            The saved state with its version incremented

        Raises:
            ConcurrentCreditUpdateException: If the stored version moved on
        """
        ...


class TransactionBatchRepository(ABC):
    """
    Append/query access to persisted transaction batches.
    """

    @abstractmethod
    async def save(self, batch: TransactionBatch) -> TransactionBatch:
        """
        Append a batch.

        Args:
            batch: The batch to save

        Returns:
            The saved batch
        """
        ...

    @abstractmethod
    async def get_latest(self, user_id: str) -> Optional[TransactionBatch]:
        """
        Retrieve the most recent batch for a user.

        Args:
            user_id: The user's identifier

        Returns:
            The newest batch, or None if the user has none
        """
        ...

    @abstractmethod
    async def get_by_user_id(
        self,
        user_id: str,
        limit: int = 10,
        offset: int = 0,
    ) -> List[TransactionBatch]:
        """
        Retrieve batches for a user.

        Returns:
            List of batches, ordered by created_at descending
        """
        ...
