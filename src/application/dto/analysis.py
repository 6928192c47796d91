"""Data transfer objects for transaction analysis operations."""

from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from src.domain.entities import AnalysisWarning, Transaction


@dataclass(frozen=True)
class AnalyzeBatchRequest:
    """Input data for analyzing a batch of transactions."""
    user_id: str
    transactions: List[Transaction]

    def validate(self) -> List[str]:
        errors = []

        if not self.user_id or not self.user_id.strip():
            errors.append("user_id is required")

        for index, tx in enumerate(self.transactions):
            if tx.amount < 0:
                errors.append(f"transactions[{index}].amount must not be negative")

        return errors


@dataclass(frozen=True)
class EnrichmentOutcome:
    """
    What a cache-first enrichment pass produced.

    ``transactions`` keeps the input order; anything still unanalyzed
    is counted in ``pending_count``.
    """

    transactions: List[Transaction]
    warnings: List[AnalysisWarning] = field(default_factory=list)
    cache_hits: int = 0
    enriched: int = 0

    @property
    def pending_count(self) -> int:
        return sum(1 for tx in self.transactions if not tx.analyzed)


@dataclass(frozen=True)
class AnalysisResult:
    """Output of an analyze-batch call, possibly partial."""

    user_id: str
    transactions: List[Transaction]
    warnings: List[AnalysisWarning]
    cache_hits: int = 0
    enriched: int = 0
    batch_id: Optional[UUID] = None

    @property
    def pending_count(self) -> int:
        return sum(1 for tx in self.transactions if not tx.analyzed)

    @property
    def complete(self) -> bool:
        return self.pending_count == 0 and not self.warnings

    @classmethod
    def from_outcome(
        cls,
        user_id: str,
        outcome: EnrichmentOutcome,
        warnings: List[AnalysisWarning],
        batch_id: Optional[UUID],
    ) -> "AnalysisResult":
        return cls(
            user_id=user_id,
            transactions=outcome.transactions,
            warnings=warnings,
            cache_hits=outcome.cache_hits,
            enriched=outcome.enriched,
            batch_id=batch_id,
        )
