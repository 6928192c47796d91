"""Cache-first enrichment of unanalyzed transactions."""

import asyncio
import math
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import structlog

from src.application.dto import EnrichmentOutcome
from src.core.config import settings
from src.core.metrics import (
    record_cache_lookup,
    record_cache_write_failure,
    record_enrichment_request,
    track_enrichment_latency,
)
from src.core.retry import RetryPolicy, retry_async
from src.domain.entities import (
    AnalysisFields,
    AnalysisWarning,
    Transaction,
    VendorAnalysis,
    WarningCode,
)
from src.domain.exceptions import (
    DomainException,
    EnrichmentResponseException,
    EnrichmentTimeoutException,
    EnrichmentUnavailableException,
)
from src.domain.interfaces import (
    EnrichmentClient,
    EnrichmentResult,
    EnrichmentStub,
    VendorCacheRepository,
)
from src.service.transactions import identify, is_cacheable, merge, normalize_vendor_name

logger = structlog.get_logger(__name__)


class VendorCacheOrchestrator:
    """
    Fills in analysis for unanalyzed transactions, cache first.

    The enrichment provider is slow and costly, so every pass makes at
    most one batched call, and only for vendors the cache cannot answer.
    Provider and store failures degrade the affected transactions to
    "still unanalyzed" and come back as warnings; they never fail the pass.
    """

    def __init__(
        self,
        vendor_cache: VendorCacheRepository,
        enrichment_client: EnrichmentClient,
        lookup_concurrency: int | None = None,
        enrichment_timeout: float | None = None,
        cache_ttl: timedelta | None = None,
        store_policy: RetryPolicy | None = None,
        enrichment_policy: RetryPolicy | None = None,
    ):
        self._vendor_cache = vendor_cache
        self._enrichment_client = enrichment_client
        self._lookup_concurrency = lookup_concurrency or settings.cache_lookup_concurrency
        self._enrichment_timeout = enrichment_timeout or settings.enrichment_timeout
        self._cache_ttl = cache_ttl or timedelta(days=settings.vendor_cache_ttl_days)
        self._store_policy = store_policy or RetryPolicy.for_store()
        self._enrichment_policy = enrichment_policy or RetryPolicy.for_enrichment()

    async def enrich(self, transactions: Sequence[Transaction]) -> EnrichmentOutcome:
        """
        Analyze every unanalyzed transaction that cache or provider can cover.

        Algorithm:
            1. Skip transactions that are already analyzed
            2. Look up each distinct vendor key in the cache, concurrently
            3. Send every cache miss to the provider in one batched call
            4. Match results back by echoed id, never by position
            5. Merge everything onto the input, which keeps earlier analysis
            6. Write new cache entries, best-effort

        Cancelling the caller cancels the in-flight provider call, and
        nothing is written to the cache.

        Args:
            transactions: Mix of analyzed and unanalyzed transactions

        Returns:
            EnrichmentOutcome with the merged list, warnings and counters
        """
        transactions = list(transactions)
        warnings: List[AnalysisWarning] = []

        candidates = [tx for tx in transactions if not tx.analyzed]
        if not candidates:
            return EnrichmentOutcome(transactions=merge(transactions, []))

        log = logger.bind(total=len(transactions), candidates=len(candidates))

        vendor_keys = {identify(tx): normalize_vendor_name(tx.merchant_name) for tx in candidates}
        cached = await self._lookup_all(candidates, vendor_keys, warnings)

        from_cache: List[Transaction] = []
        needs_enrichment: Dict[str, Transaction] = {}
        for tx in candidates:
            tx_id = identify(tx)
            entry = cached.get(vendor_keys[tx_id])
            if entry is not None:
                from_cache.append(tx.with_analysis(entry.analysis))
            else:
                needs_enrichment[tx_id] = tx

        enriched = await self._enrich_batch(needs_enrichment, warnings)

        result = merge(transactions, [*from_cache, *enriched])

        await self._write_cache(enriched, vendor_keys, warnings)

        outcome = EnrichmentOutcome(
            transactions=result,
            warnings=warnings,
            cache_hits=len(from_cache),
            enriched=len(enriched),
        )
        log.info(
            "enrichment_pass_completed",
            cache_hits=outcome.cache_hits,
            enriched=outcome.enriched,
            pending=outcome.pending_count,
            warnings=len(warnings),
        )
        return outcome

    # -------------------------------------------------------------------------
    # Cache lookups
    # -------------------------------------------------------------------------

    async def _lookup_all(
        self,
        candidates: List[Transaction],
        vendor_keys: Dict[str, str],
        warnings: List[AnalysisWarning],
    ) -> Dict[str, VendorAnalysis]:
        """Look up distinct vendor keys on a bounded worker pool."""
        distinct_keys = sorted({key for key in vendor_keys.values() if is_cacheable(key)})
        semaphore = asyncio.Semaphore(self._lookup_concurrency)

        async def lookup(key: str) -> Tuple[str, Optional[VendorAnalysis], bool]:
            async with semaphore:
                try:
                    entry = await retry_async(
                        lambda: self._vendor_cache.get(key),
                        policy=self._store_policy,
                        operation_name="vendor_cache_get",
                    )
                except DomainException as e:
                    record_cache_lookup("error")
                    logger.warning(
                        "vendor_cache_lookup_failed",
                        vendor_key=key,
                        error=e.message,
                        code=e.code,
                    )
                    return key, None, True

            if entry is None or not entry.is_fresh(self._cache_ttl):
                record_cache_lookup("miss")
                return key, None, False

            record_cache_lookup("hit")
            return key, entry, False

        results = await asyncio.gather(*(lookup(key) for key in distinct_keys))

        hits: Dict[str, VendorAnalysis] = {}
        failed_keys = set()
        for key, entry, failed in results:
            if entry is not None:
                hits[key] = entry
            if failed:
                failed_keys.add(key)

        if failed_keys:
            affected = [identify(tx) for tx in candidates if vendor_keys[identify(tx)] in failed_keys]
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.CACHE_LOOKUP_FAILED,
                    message=(
                        f"Vendor cache unavailable for {len(failed_keys)} vendor(s); "
                        "sent to enrichment instead"
                    ),
                    transaction_ids=affected,
                )
            )

        return hits

    # -------------------------------------------------------------------------
    # Enrichment
    # -------------------------------------------------------------------------

    async def _enrich_batch(
        self,
        needs_enrichment: Dict[str, Transaction],
        warnings: List[AnalysisWarning],
    ) -> List[Transaction]:
        """Make the single batched provider call and apply its results."""
        if not needs_enrichment:
            return []

        stubs = [
            EnrichmentStub(
                id=tx_id,
                date=tx.date,
                merchant_name=tx.merchant_name,
                amount=tx.amount,
                categories=list(tx.provider_categories),
            )
            for tx_id, tx in needs_enrichment.items()
        ]
        ids = list(needs_enrichment)
        batch_size = len(stubs)
        log = logger.bind(batch_size=batch_size)

        try:
            with track_enrichment_latency():
                response = await asyncio.wait_for(
                    retry_async(
                        lambda: self._enrichment_client.analyze(stubs),
                        policy=self._enrichment_policy,
                        operation_name="enrichment_analyze",
                    ),
                    timeout=self._enrichment_timeout,
                )
        except asyncio.CancelledError:
            record_enrichment_request("cancelled", batch_size)
            log.warning("enrichment_cancelled")
            raise
        except (asyncio.TimeoutError, EnrichmentTimeoutException):
            record_enrichment_request("timeout", batch_size)
            log.warning("enrichment_timeout", timeout=self._enrichment_timeout)
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.ENRICHMENT_TIMEOUT,
                    message=f"Enrichment timed out after {self._enrichment_timeout:.0f}s",
                    transaction_ids=ids,
                )
            )
            return []
        except EnrichmentResponseException as e:
            record_enrichment_request("invalid_response", batch_size)
            log.warning("enrichment_invalid_response", error=e.message)
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.ENRICHMENT_INVALID_RESPONSE,
                    message=e.message,
                    transaction_ids=ids,
                )
            )
            return []
        except EnrichmentUnavailableException as e:
            record_enrichment_request("unavailable", batch_size)
            log.warning("enrichment_unavailable", error=e.message)
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.ENRICHMENT_UNAVAILABLE,
                    message=e.message,
                    transaction_ids=ids,
                )
            )
            return []

        record_enrichment_request("success", batch_size)
        warnings.extend(response.warnings)

        enriched, clamped = self._apply_results(needs_enrichment, response.results)

        if clamped:
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.WEIGHT_CLAMPED,
                    message="Missing or out-of-range practice weights were set to 0",
                    transaction_ids=clamped,
                )
            )

        matched = {identify(tx) for tx in enriched}
        unmatched = [tx_id for tx_id in ids if tx_id not in matched]
        if unmatched:
            log.warning("enrichment_partial", unmatched=len(unmatched))
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.ENRICHMENT_PARTIAL,
                    message=(
                        f"{len(unmatched)} of {batch_size} transactions got no "
                        "enrichment result and remain pending"
                    ),
                    transaction_ids=unmatched,
                )
            )

        return enriched

    def _apply_results(
        self,
        needs_enrichment: Dict[str, Transaction],
        results: Iterable[EnrichmentResult],
    ) -> Tuple[List[Transaction], List[str]]:
        """Attach results to their transactions by echoed id."""
        enriched: Dict[str, Transaction] = {}
        clamped: List[str] = []

        for result in results:
            tx = needs_enrichment.get(result.id)
            if tx is None:
                logger.warning("enrichment_result_unknown_id", result_id=result.id)
                continue
            if result.id in enriched:
                logger.warning("enrichment_result_duplicate_id", result_id=result.id)
                continue

            weights, was_clamped = sanitize_weights(
                [*result.unethical_practices, *result.ethical_practices],
                result.practice_weights,
            )
            if was_clamped:
                clamped.append(result.id)

            enriched[result.id] = tx.with_analysis(
                AnalysisFields(
                    unethical_practices=list(result.unethical_practices),
                    ethical_practices=list(result.ethical_practices),
                    practice_weights=weights,
                    practice_categories=dict(result.practice_categories),
                    practice_search_terms=dict(result.practice_search_terms),
                    information=dict(result.information),
                    citations=dict(result.citations),
                )
            )

        return list(enriched.values()), clamped

    # -------------------------------------------------------------------------
    # Cache writes
    # -------------------------------------------------------------------------

    async def _write_cache(
        self,
        enriched: List[Transaction],
        vendor_keys: Dict[str, str],
        warnings: List[AnalysisWarning],
    ) -> None:
        """Upsert one entry per vendor. Failures are reported, never raised."""
        entries: Dict[str, VendorAnalysis] = {}
        for tx in enriched:
            key = vendor_keys[identify(tx)]
            if is_cacheable(key):
                entries[key] = VendorAnalysis.from_transaction(key, tx)

        failed: List[str] = []
        for key, entry in entries.items():
            try:
                await retry_async(
                    lambda entry=entry: self._vendor_cache.upsert(entry),
                    policy=self._store_policy,
                    operation_name="vendor_cache_upsert",
                )
            except DomainException as e:
                record_cache_write_failure()
                logger.warning(
                    "vendor_cache_write_failed",
                    vendor_key=key,
                    error=e.message,
                    code=e.code,
                )
                failed.append(key)

        if failed:
            affected = [identify(tx) for tx in enriched if vendor_keys[identify(tx)] in failed]
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.CACHE_WRITE_FAILED,
                    message=f"Could not cache analysis for {len(failed)} vendor(s)",
                    transaction_ids=affected,
                )
            )


def sanitize_weights(
    practices: Iterable[str],
    raw_weights: Dict[str, object],
) -> Tuple[Dict[str, float], bool]:
    """
    Build a weight for every listed practice.

    Missing, non-numeric, non-finite or out-of-range weights become 0.

    Returns:
        (weights, clamped) where clamped tells whether anything was replaced
    """
    weights: Dict[str, float] = {}
    clamped = False

    for practice in practices:
        raw = raw_weights.get(practice)
        value: Optional[float] = None
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            value = float(raw)
        elif isinstance(raw, str):
            try:
                value = float(raw)
            except ValueError:
                value = None

        if value is None or not math.isfinite(value) or value < 0 or value > 100:
            weights[practice] = 0.0
            clamped = True
        else:
            weights[practice] = value

    return weights, clamped
