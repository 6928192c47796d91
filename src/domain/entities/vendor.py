"""Vendor analysis cache entry."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .transaction import AnalysisFields, Transaction


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class VendorAnalysis:
    """
    Cached analysis for one normalized merchant.

    Entries are always replaced wholesale, never patched field by field.
    """

    vendor_key: str
    original_name: str
    analysis: AnalysisFields
    analysis_source: str = "enrichment"
    analyzed_at: datetime = field(default_factory=utcnow)

    def is_fresh(self, max_age: timedelta, now: datetime | None = None) -> bool:
        """Whether the entry is young enough to serve from cache."""
        return (now or utcnow()) - self.analyzed_at <= max_age

    @classmethod
    def from_transaction(cls, vendor_key: str, transaction: Transaction) -> "VendorAnalysis":
        """Snapshot an analyzed transaction's practice data for its vendor."""
        return cls(
            vendor_key=vendor_key,
            original_name=transaction.merchant_name,
            analysis=AnalysisFields(
                unethical_practices=list(transaction.unethical_practices),
                ethical_practices=list(transaction.ethical_practices),
                practice_weights=dict(transaction.practice_weights),
                practice_categories=dict(transaction.practice_categories),
                practice_search_terms=dict(transaction.practice_search_terms),
                information=dict(transaction.information),
                citations=dict(transaction.citations),
            ),
        )
