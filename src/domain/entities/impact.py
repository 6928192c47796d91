"""Derived impact summary. Never persisted."""

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class ImpactAnalysis:
    """Totals computed from a transaction list and the user's applied credit."""

    positive_impact: float
    negative_impact: float
    net_societal_debt: float
    effective_debt: float
    available_credit: float
    applied_credit: float
    debt_percentage: float
    total_transactions: int = 0
    transactions_with_debt: int = 0
    transactions_with_credit: int = 0
    negative_categories: Dict[str, float] = field(default_factory=dict)
    positive_categories: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "positive_impact": round(self.positive_impact, 2),
            "negative_impact": round(self.negative_impact, 2),
            "net_societal_debt": round(self.net_societal_debt, 2),
            "effective_debt": round(self.effective_debt, 2),
            "available_credit": round(self.available_credit, 2),
            "applied_credit": round(self.applied_credit, 2),
            "debt_percentage": round(self.debt_percentage, 2),
            "total_transactions": self.total_transactions,
            "transactions_with_debt": self.transactions_with_debt,
            "transactions_with_credit": self.transactions_with_credit,
            "negative_categories": {
                k: round(v, 2) for k, v in self.negative_categories.items()
            },
            "positive_categories": {
                k: round(v, 2) for k, v in self.positive_categories.items()
            },
        }
