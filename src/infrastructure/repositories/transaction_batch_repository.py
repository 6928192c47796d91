"""PostgreSQL implementation of TransactionBatchRepository."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import Transaction, TransactionBatch
from src.domain.interfaces import TransactionBatchRepository
from src.infrastructure.database.models import TransactionBatchModel

from .errors import as_utc, store_errors


class PostgresTransactionBatchRepository(TransactionBatchRepository):
    """
    PostgreSQL implementation of the transaction batch repository.

    Transactions are stored as a JSON document per batch.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, batch: TransactionBatch) -> TransactionBatch:
        """Append a batch."""
        model = TransactionBatchModel(
            id=str(batch.id),
            user_id=batch.user_id,
            transactions=[tx.to_dict() for tx in batch.transactions],
            total_negative_impact=batch.total_negative_impact,
            debt_percentage=batch.debt_percentage,
            created_at=batch.created_at,
        )

        async with store_errors("transaction_batch_save", self._session):
            self._session.add(model)
            await self._session.flush()

        return batch

    async def get_latest(self, user_id: str) -> Optional[TransactionBatch]:
        """Retrieve the newest batch for a user."""
        batches = await self.get_by_user_id(user_id, limit=1)
        return batches[0] if batches else None

    async def get_by_user_id(
        self,
        user_id: str,
        limit: int = 10,
        offset: int = 0,
    ) -> List[TransactionBatch]:
        """Retrieve batches for a user, ordered by created_at descending."""
        stmt = (
            select(TransactionBatchModel)
            .where(TransactionBatchModel.user_id == user_id)
            .order_by(TransactionBatchModel.created_at.desc())
            .limit(limit)
            .offset(offset)
        )

        async with store_errors("transaction_batch_query", self._session):
            result = await self._session.execute(stmt)
            models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    def _to_entity(self, model: TransactionBatchModel) -> TransactionBatch:
        """Convert database model to domain entity."""
        return TransactionBatch(
            id=UUID(model.id),
            user_id=model.user_id,
            transactions=[Transaction.from_dict(item) for item in model.transactions],
            total_negative_impact=model.total_negative_impact,
            debt_percentage=model.debt_percentage,
            created_at=as_utc(model.created_at),
        )
