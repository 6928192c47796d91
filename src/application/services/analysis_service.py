"""Analysis service - orchestrates the analyze-batch use case."""

from typing import List, Sequence

import structlog

from src.application.dto import AnalysisResult, AnalyzeBatchRequest
from src.core.metrics import record_analysis_outcome
from src.core.retry import RetryPolicy, retry_async
from src.domain.entities import (
    AnalysisWarning,
    Transaction,
    TransactionBatch,
    WarningCode,
)
from src.domain.exceptions import DomainException, InvalidRequestException
from src.domain.interfaces import BankAPIClient, TransactionBatchRepository
from src.service.impact import debt_percentage, negative_impact
from src.service.transactions import merge

from .enrichment_orchestrator import VendorCacheOrchestrator

logger = structlog.get_logger(__name__)


class AnalysisService:
    """
    Application service for transaction analysis use cases.
    """

    def __init__(
        self,
        batch_repository: TransactionBatchRepository,
        orchestrator: VendorCacheOrchestrator,
        bank_client: BankAPIClient,
        store_policy: RetryPolicy | None = None,
    ):
        self._batch_repo = batch_repository
        self._orchestrator = orchestrator
        self._bank_client = bank_client
        self._store_policy = store_policy or RetryPolicy.for_store()

    async def analyze_batch(
        self,
        user_id: str,
        transactions: Sequence[Transaction],
    ) -> AnalysisResult:
        """
        Reconcile new transactions with the user's history and analyze them.

        The latest persisted batch is merged with ``transactions`` so
        earlier analysis is never lost, the merged list goes through the
        cache-first orchestrator, and the result is appended as a new batch.

        Args:
            user_id: The user's identifier
            transactions: Newly fetched transactions

        Returns:
            AnalysisResult with the best achievable list and any warnings

        Raises:
            InvalidRequestException: If user_id is missing or an amount is negative
        """
        request = AnalyzeBatchRequest(user_id=user_id, transactions=list(transactions))
        errors = request.validate()
        if errors:
            raise InvalidRequestException("; ".join(errors))

        log = logger.bind(user_id=user_id, incoming=len(request.transactions))
        log.info("analysis_requested")

        warnings: List[AnalysisWarning] = []

        previous = await self._load_previous(user_id, warnings)
        merged = merge(previous, request.transactions)

        outcome = await self._orchestrator.enrich(merged)
        warnings.extend(outcome.warnings)

        batch = TransactionBatch(
            user_id=user_id,
            transactions=outcome.transactions,
            total_negative_impact=negative_impact(outcome.transactions),
            debt_percentage=debt_percentage(outcome.transactions),
        )

        batch_id = None
        try:
            await retry_async(
                lambda: self._batch_repo.save(batch),
                policy=self._store_policy,
                operation_name="transaction_batch_save",
            )
            batch_id = batch.id
        except DomainException as e:
            log.error("transaction_batch_save_failed", error=e.message, code=e.code)
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.BATCH_SAVE_FAILED,
                    message="Analysis succeeded but could not be saved",
                )
            )

        result = AnalysisResult.from_outcome(user_id, outcome, warnings, batch_id)
        record_analysis_outcome(result.cache_hits, result.enriched, result.pending_count)

        log.info(
            "analysis_completed",
            total=len(result.transactions),
            cache_hits=result.cache_hits,
            enriched=result.enriched,
            pending=result.pending_count,
            warnings=len(warnings),
        )

        return result

    async def refresh_from_bank(self, user_id: str) -> AnalysisResult:
        """
        Fetch the user's transactions from the bank provider and analyze them.

        Raises:
            UserNotFoundException: If the bank does not know the user
            BankAPIException: If the bank provider keeps failing
        """
        if not user_id or not user_id.strip():
            raise InvalidRequestException("user_id is required")

        transactions = await self._bank_client.get_transactions(user_id)
        logger.info("transactions_fetched", user_id=user_id, count=len(transactions))

        return await self.analyze_batch(user_id, transactions)

    async def get_latest_transactions(self, user_id: str) -> List[Transaction]:
        """Return the transactions of the user's newest batch, or an empty list."""
        if not user_id or not user_id.strip():
            raise InvalidRequestException("user_id is required")

        batch = await retry_async(
            lambda: self._batch_repo.get_latest(user_id),
            policy=self._store_policy,
            operation_name="transaction_batch_latest",
        )
        return list(batch.transactions) if batch else []

    async def _load_previous(
        self,
        user_id: str,
        warnings: List[AnalysisWarning],
    ) -> List[Transaction]:
        try:
            batch = await retry_async(
                lambda: self._batch_repo.get_latest(user_id),
                policy=self._store_policy,
                operation_name="transaction_batch_latest",
            )
        except DomainException as e:
            logger.warning("transaction_history_unavailable", user_id=user_id, error=e.message)
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.HISTORY_LOAD_FAILED,
                    message="Previous analysis could not be loaded; analyzing new transactions only",
                )
            )
            return []

        return list(batch.transactions) if batch else []
