"""Transaction entity representing a bank transaction and its impact analysis."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


@dataclass
class Transaction:
    """
    A single spending event, optionally annotated with ethical impact.

    Attributes:
        date: ISO date of the transaction (YYYY-MM-DD)
        merchant_name: Merchant as reported by the bank feed
        amount: Positive amount in the account currency
        analyzed: True once practices and weights are attached
        unethical_practices: Practices that add societal debt
        ethical_practices: Practices that earn credit
        practice_weights: Percent (0-100) of amount attributed to each practice
        practice_categories: Declared category per practice
        practice_search_terms: Display-only search hints per practice
        information: Display-only notes per practice
        citations: Display-only sources per practice
        external_id: Provider-assigned transaction id, if any
        provider_categories: Bank-provided categories, forwarded to enrichment
    """

    date: str
    merchant_name: str
    amount: float
    analyzed: bool = False
    unethical_practices: List[str] = field(default_factory=list)
    ethical_practices: List[str] = field(default_factory=list)
    practice_weights: Dict[str, float] = field(default_factory=dict)
    practice_categories: Dict[str, str] = field(default_factory=dict)
    practice_search_terms: Dict[str, Any] = field(default_factory=dict)
    information: Dict[str, Any] = field(default_factory=dict)
    citations: Dict[str, Any] = field(default_factory=dict)
    external_id: Optional[str] = None
    provider_categories: List[str] = field(default_factory=list)

    @property
    def practices(self) -> List[str]:
        """All practices attached to this transaction, unethical first."""
        return [*self.unethical_practices, *self.ethical_practices]

    def with_analysis(self, analysis: "AnalysisFields") -> "Transaction":
        """Return a copy carrying the given analysis, marked analyzed."""
        return replace(
            self,
            analyzed=True,
            unethical_practices=list(analysis.unethical_practices),
            ethical_practices=list(analysis.ethical_practices),
            practice_weights=dict(analysis.practice_weights),
            practice_categories=dict(analysis.practice_categories),
            practice_search_terms=dict(analysis.practice_search_terms),
            information=dict(analysis.information),
            citations=dict(analysis.citations),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date,
            "merchant_name": self.merchant_name,
            "amount": self.amount,
            "analyzed": self.analyzed,
            "unethical_practices": list(self.unethical_practices),
            "ethical_practices": list(self.ethical_practices),
            "practice_weights": dict(self.practice_weights),
            "practice_categories": dict(self.practice_categories),
            "practice_search_terms": dict(self.practice_search_terms),
            "information": dict(self.information),
            "citations": dict(self.citations),
            "external_id": self.external_id,
            "provider_categories": list(self.provider_categories),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Rebuild a transaction persisted with ``to_dict``."""
        return cls(
            date=data["date"],
            merchant_name=data["merchant_name"],
            amount=float(data["amount"]),
            analyzed=bool(data.get("analyzed", False)),
            unethical_practices=list(data.get("unethical_practices") or []),
            ethical_practices=list(data.get("ethical_practices") or []),
            practice_weights=dict(data.get("practice_weights") or {}),
            practice_categories=dict(data.get("practice_categories") or {}),
            practice_search_terms=dict(data.get("practice_search_terms") or {}),
            information=dict(data.get("information") or {}),
            citations=dict(data.get("citations") or {}),
            external_id=data.get("external_id"),
            provider_categories=list(data.get("provider_categories") or []),
        )


@dataclass(frozen=True)
class AnalysisFields:
    """The practice data shared by transactions and vendor cache entries."""

    unethical_practices: List[str] = field(default_factory=list)
    ethical_practices: List[str] = field(default_factory=list)
    practice_weights: Dict[str, float] = field(default_factory=dict)
    practice_categories: Dict[str, str] = field(default_factory=dict)
    practice_search_terms: Dict[str, Any] = field(default_factory=dict)
    information: Dict[str, Any] = field(default_factory=dict)
    citations: Dict[str, Any] = field(default_factory=dict)
