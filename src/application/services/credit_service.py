"""Credit ledger service - tracks and applies earned credit against debt."""

from typing import List, Optional, Sequence
from uuid import uuid4

import structlog

from src.application.dto import ApplyCreditRequest, CreditApplication
from src.core.metrics import record_credit_application
from src.core.retry import RetryPolicy, retry_async
from src.domain.entities import CreditState, ImpactAnalysis, Transaction, utcnow
from src.domain.exceptions import InvalidRequestException
from src.domain.interfaces import CreditStateRepository, TransactionBatchRepository
from src.service.impact import calculate_impact_analysis

from .locks import UserLockRegistry

logger = structlog.get_logger(__name__)


class CreditLedgerService:
    """
    Application service for the per-user credit ledger.

    Credit is a running balance: applying moves an amount from available
    to applied, so available + applied always equals the positive impact
    the user has earned. Mutations for one user are serialized by a
    process-wide lock and guarded across processes by a version check.
    """

    def __init__(
        self,
        credit_repository: CreditStateRepository,
        batch_repository: TransactionBatchRepository,
        lock_registry: UserLockRegistry,
        store_policy: RetryPolicy | None = None,
    ):
        self._credit_repo = credit_repository
        self._batch_repo = batch_repository
        self._locks = lock_registry
        self._store_policy = store_policy or RetryPolicy.for_store()

    @staticmethod
    def recompute(transactions: Sequence[Transaction], applied_credit: float) -> ImpactAnalysis:
        """
        Derive the impact summary for a transaction list.

        available_credit = max(0, positive_impact - applied_credit)
        effective_debt = max(0, negative_impact - applied_credit)
        """
        return calculate_impact_analysis(list(transactions), applied_credit)

    async def get_credit_state(self, user_id: str) -> CreditState:
        """Return the user's credit state, creating a zeroed one on first access."""
        self._require_user(user_id)
        return await retry_async(
            lambda: self._load_or_create(user_id),
            policy=self._store_policy,
            operation_name="credit_state_load",
        )

    async def get_impact(
        self,
        user_id: str,
        transactions: Optional[Sequence[Transaction]] = None,
    ) -> ImpactAnalysis:
        """
        Recompute the user's impact and persist the refreshed available credit.

        Args:
            user_id: The user's identifier
            transactions: Transactions to evaluate; defaults to the latest batch

        Returns:
            ImpactAnalysis reflecting the user's applied credit
        """
        self._require_user(user_id)

        async with self._locks.lock_for(user_id):
            return await retry_async(
                lambda: self._refresh_once(user_id, transactions),
                policy=self._store_policy,
                operation_name="credit_refresh",
            )

    async def apply_credit(self, user_id: str, amount: float) -> CreditApplication:
        """
        Apply up to ``amount`` of available credit against outstanding debt.

        credit = min(amount, available_credit, effective_debt), evaluated
        against the user's latest saved batch. When that is not positive the
        call is a no-op returning ok=False and the stored state is left
        untouched.

        Each call carries its own apply id. A retried attempt that finds its
        id already stored reports the committed write instead of applying
        again.

        Args:
            user_id: The user's identifier
            amount: Requested amount (>= 0, finite)

        Returns:
            CreditApplication with the applied amount and resulting state

        Raises:
            InvalidRequestException: If user_id is missing or amount is
                negative or non-finite
        """
        request = ApplyCreditRequest(user_id=user_id, amount=amount)
        errors = request.validate()
        if errors:
            raise InvalidRequestException("; ".join(errors))

        apply_id = uuid4().hex
        log = logger.bind(user_id=user_id, amount_requested=amount, apply_id=apply_id)

        async with self._locks.lock_for(user_id):
            application = await retry_async(
                lambda: self._apply_once(user_id, float(amount), apply_id),
                policy=self._store_policy,
                operation_name="credit_apply",
            )

        record_credit_application(application.applied_amount)

        if application.ok:
            log.info(
                "credit_applied",
                applied=application.applied_amount,
                available_credit=application.state.available_credit,
                applied_credit=application.state.applied_credit,
            )
        else:
            log.info(
                "credit_apply_noop",
                available_credit=application.impact.available_credit,
                effective_debt=application.impact.effective_debt,
            )

        return application

    async def _apply_once(self, user_id: str, amount: float, apply_id: str) -> CreditApplication:
        """One read-modify-write cycle. Retried as a whole on conflicts."""
        state = await self._load_or_create(user_id)
        txs = await self._latest_transactions(user_id)

        if state.last_apply_id == apply_id:
            # An earlier attempt committed before its acknowledgement was lost
            logger.warning("credit_apply_already_committed", user_id=user_id, apply_id=apply_id)
            return CreditApplication(
                applied_amount=state.last_applied_amount,
                ok=True,
                state=state,
                impact=self.recompute(txs, state.applied_credit),
            )

        before = self.recompute(txs, state.applied_credit)
        credit = min(amount, before.available_credit, before.effective_debt)

        if credit <= 0:
            return CreditApplication(applied_amount=0.0, ok=False, state=state, impact=before)

        expected_version = state.version
        state.available_credit = before.available_credit - credit
        state.applied_credit += credit
        state.last_applied_amount = credit
        state.last_applied_at = utcnow()
        state.last_apply_id = apply_id

        state = await self._credit_repo.save(state, expected_version)

        return CreditApplication(
            applied_amount=credit,
            ok=True,
            state=state,
            impact=self.recompute(txs, state.applied_credit),
        )

    async def _refresh_once(
        self,
        user_id: str,
        transactions: Optional[Sequence[Transaction]],
    ) -> ImpactAnalysis:
        state = await self._load_or_create(user_id)
        txs = await self._resolve_transactions(user_id, transactions)
        analysis = self.recompute(txs, state.applied_credit)

        if state.available_credit != analysis.available_credit:
            expected_version = state.version
            state.available_credit = analysis.available_credit
            await self._credit_repo.save(state, expected_version)

        return analysis

    async def _load_or_create(self, user_id: str) -> CreditState:
        state = await self._credit_repo.get(user_id)
        if state is None:
            state = await self._credit_repo.create(CreditState(user_id=user_id))
            logger.info("credit_state_created", user_id=user_id)
        return state

    async def _resolve_transactions(
        self,
        user_id: str,
        transactions: Optional[Sequence[Transaction]],
    ) -> List[Transaction]:
        if transactions is not None:
            return list(transactions)
        return await self._latest_transactions(user_id)

    async def _latest_transactions(self, user_id: str) -> List[Transaction]:
        batch = await self._batch_repo.get_latest(user_id)
        return list(batch.transactions) if batch else []

    @staticmethod
    def _require_user(user_id: str) -> None:
        if not user_id or not user_id.strip():
            raise InvalidRequestException("user_id is required")
