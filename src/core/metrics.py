"""Prometheus metrics for the Impact Ledger service.

Metrics are organized into two categories:

Business Metrics (for Product dashboards):
- impact_credit_applications_total: Apply-credit calls by outcome
- impact_credit_applied_amount_total: Sum of credit moved to applied
- impact_transactions_analyzed_total: Transactions analyzed by source

Technical Metrics (for Engineering/SRE):
- impact_enrichment_latency_seconds: Batched enrichment call latency
- impact_enrichment_requests_total: Enrichment calls by outcome
- impact_vendor_cache_lookups_total: Cache lookups by result
- impact_vendor_cache_write_failures_total: Best-effort cache writes that failed
- impact_bank_fetch_failures_total: Bank API failures
- impact_bank_fetch_latency_seconds: Bank API latency
- impact_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics
# =============================================================================

credit_applications_total = Counter(
    "impact_credit_applications_total",
    "Total number of apply-credit calls",
    ["outcome"],  # applied, noop
)

credit_applied_amount = Counter(
    "impact_credit_applied_amount_total",
    "Total credit moved from available to applied",
)

transactions_analyzed_total = Counter(
    "impact_transactions_analyzed_total",
    "Transactions that became analyzed",
    ["source"],  # cache, enrichment
)

transactions_pending_total = Counter(
    "impact_transactions_pending_total",
    "Transactions left unanalyzed after an analysis pass",
)


# =============================================================================
# Technical Metrics
# =============================================================================

enrichment_latency = Histogram(
    "impact_enrichment_latency_seconds",
    "Batched enrichment call latency in seconds",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 180.0],
)

enrichment_requests_total = Counter(
    "impact_enrichment_requests_total",
    "Total number of batched enrichment calls",
    ["outcome"],  # success, timeout, unavailable, invalid_response, cancelled
)

enrichment_batch_size = Histogram(
    "impact_enrichment_batch_size",
    "Number of transactions sent per enrichment call",
    buckets=[1, 5, 10, 25, 50, 100, 250, 500],
)

vendor_cache_lookups = Counter(
    "impact_vendor_cache_lookups_total",
    "Vendor cache lookups by result",
    ["result"],  # hit, miss, error
)

vendor_cache_write_failures = Counter(
    "impact_vendor_cache_write_failures_total",
    "Vendor cache writes that failed and were skipped",
)

bank_fetch_latency = Histogram(
    "impact_bank_fetch_latency_seconds",
    "Bank API fetch latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

bank_fetch_failures = Counter(
    "impact_bank_fetch_failures_total",
    "Total number of bank API failures",
    ["error_type"],  # timeout, error, not_found
)

bank_fetch_total = Counter(
    "impact_bank_fetch_total",
    "Total number of bank API requests",
    ["status"],  # success, failure
)

http_requests_total = Counter(
    "impact_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "impact_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_credit_application(applied_amount: float) -> None:
    """Record the outcome of an apply-credit call."""
    if applied_amount > 0:
        credit_applications_total.labels(outcome="applied").inc()
        credit_applied_amount.inc(applied_amount)
    else:
        credit_applications_total.labels(outcome="noop").inc()


def record_analysis_outcome(cache_hits: int, enriched: int, pending: int) -> None:
    """Record how an analysis pass filled its transactions."""
    if cache_hits:
        transactions_analyzed_total.labels(source="cache").inc(cache_hits)
    if enriched:
        transactions_analyzed_total.labels(source="enrichment").inc(enriched)
    if pending:
        transactions_pending_total.inc(pending)


@contextmanager
def track_enrichment_latency() -> Generator[None, None, None]:
    """Context manager to track enrichment call latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        enrichment_latency.observe(duration)


def record_enrichment_request(outcome: str, batch_size: int) -> None:
    """Record a batched enrichment call."""
    enrichment_requests_total.labels(outcome=outcome).inc()
    enrichment_batch_size.observe(batch_size)


def record_cache_lookup(result: str) -> None:
    """Record a vendor cache lookup (hit, miss or error)."""
    vendor_cache_lookups.labels(result=result).inc()


def record_cache_write_failure() -> None:
    """Record a vendor cache write that was dropped."""
    vendor_cache_write_failures.inc()


@contextmanager
def track_bank_fetch_latency() -> Generator[None, None, None]:
    """Context manager to track bank API fetch latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        bank_fetch_latency.observe(duration)


def record_bank_fetch_success() -> None:
    """Record a successful bank API fetch."""
    bank_fetch_total.labels(status="success").inc()


def record_bank_fetch_failure(error_type: str) -> None:
    """Record a bank API fetch failure."""
    bank_fetch_total.labels(status="failure").inc()
    bank_fetch_failures.labels(error_type=error_type).inc()


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
