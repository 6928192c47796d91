"""
Impact aggregation over analyzed transactions.
"""

from .aggregation import (
    UNCATEGORIZED_NEGATIVE,
    UNCATEGORIZED_POSITIVE,
    by_category,
    calculate_impact_analysis,
    debt_percentage,
    negative_impact,
    net_societal_debt,
    positive_impact,
    practice_contribution,
    practice_totals,
    top_categories,
    total_spent,
    transaction_societal_debt,
    valid_weight,
)

__all__ = [
    "UNCATEGORIZED_NEGATIVE",
    "UNCATEGORIZED_POSITIVE",
    "by_category",
    "calculate_impact_analysis",
    "debt_percentage",
    "negative_impact",
    "net_societal_debt",
    "positive_impact",
    "practice_contribution",
    "practice_totals",
    "top_categories",
    "total_spent",
    "transaction_societal_debt",
    "valid_weight",
]
