"""PostgreSQL implementation of CreditStateRepository."""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.entities import CreditState, utcnow
from src.domain.exceptions import ConcurrentCreditUpdateException
from src.domain.interfaces import CreditStateRepository
from src.infrastructure.database.models import CreditStateModel

from .errors import as_utc, store_errors


class PostgresCreditStateRepository(CreditStateRepository):
    """
    PostgreSQL implementation of the credit state repository.

    Every call commits in its own short session, so a write is durable
    before the caller releases its per-user lock. Writes are
    compare-and-set on ``version``.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, user_id: str) -> Optional[CreditState]:
        """Retrieve a user's credit state."""
        async with store_errors("credit_state_get"):
            async with self._session_factory() as session:
                stmt = select(CreditStateModel).where(CreditStateModel.user_id == user_id)
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def create(self, state: CreditState) -> CreditState:
        """Insert a zeroed state. Losing an insert race counts as a conflict."""
        model = CreditStateModel(
            user_id=state.user_id,
            available_credit=state.available_credit,
            applied_credit=state.applied_credit,
            last_applied_amount=state.last_applied_amount,
            last_applied_at=state.last_applied_at,
            last_apply_id=state.last_apply_id,
            version=0,
            updated_at=state.updated_at,
        )

        async with store_errors("credit_state_create"):
            async with self._session_factory() as session:
                session.add(model)
                try:
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    raise ConcurrentCreditUpdateException(state.user_id, 0) from e

        state.version = 0
        return state

    async def save(self, state: CreditState, expected_version: int) -> CreditState:
        """Write the state only if nobody else has written since it was read."""
        now = utcnow()
        stmt = (
            update(CreditStateModel)
            .where(
                CreditStateModel.user_id == state.user_id,
                CreditStateModel.version == expected_version,
            )
            .values(
                available_credit=state.available_credit,
                applied_credit=state.applied_credit,
                last_applied_amount=state.last_applied_amount,
                last_applied_at=state.last_applied_at,
                last_apply_id=state.last_apply_id,
                version=expected_version + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )

        async with store_errors("credit_state_save"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                if result.rowcount != 1:
                    await session.rollback()
                    raise ConcurrentCreditUpdateException(state.user_id, expected_version)
                await session.commit()

        state.version = expected_version + 1
        state.updated_at = now
        return state

    def _to_entity(self, model: CreditStateModel) -> CreditState:
        """Convert database model to domain entity."""
        return CreditState(
            user_id=model.user_id,
            available_credit=model.available_credit,
            applied_credit=model.applied_credit,
            last_applied_amount=model.last_applied_amount,
            last_applied_at=as_utc(model.last_applied_at),
            last_apply_id=model.last_apply_id,
            version=model.version,
            updated_at=as_utc(model.updated_at),
        )
