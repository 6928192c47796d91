"""
Unit tests for impact aggregation.

Tests cover:
- Per-practice contributions and their containment of bad data
- Positive/negative totals and debt percentage
- Category grouping with uncategorized sentinels
- The combined impact summary and applied-credit accounting
"""

import math

import pytest

from src.domain.entities import Transaction
from src.service.impact import (
    UNCATEGORIZED_NEGATIVE,
    UNCATEGORIZED_POSITIVE,
    by_category,
    calculate_impact_analysis,
    debt_percentage,
    negative_impact,
    net_societal_debt,
    positive_impact,
    practice_totals,
    top_categories,
    total_spent,
    transaction_societal_debt,
    valid_weight,
)


# =============================================================================
# Helper Functions
# =============================================================================

def make_transaction(
    amount: float = 100.0,
    unethical: dict | None = None,
    ethical: dict | None = None,
    categories: dict | None = None,
    merchant: str = "Test Merchant",
) -> Transaction:
    """
    Helper to create an analyzed transaction.

    ``unethical`` and ``ethical`` map practice -> weight.
    """
    unethical = unethical or {}
    ethical = ethical or {}
    return Transaction(
        date="2025-03-01",
        merchant_name=merchant,
        amount=amount,
        analyzed=True,
        unethical_practices=list(unethical),
        ethical_practices=list(ethical),
        practice_weights={**unethical, **ethical},
        practice_categories=categories or {},
    )


# =============================================================================
# Weight Tests
# =============================================================================

class TestValidWeight:
    """Tests for valid_weight function."""

    @pytest.mark.parametrize("weight", [0, 25, 99.5, 100])
    def test_in_range_weights_pass_through(self, weight):
        assert valid_weight(weight) == weight

    @pytest.mark.parametrize(
        "weight",
        [-1, 100.01, 150, float("nan"), float("inf"), "abc", None, True],
    )
    def test_invalid_weights_contribute_zero(self, weight):
        assert valid_weight(weight) == 0.0


# =============================================================================
# Totals Tests
# =============================================================================

class TestImpactTotals:
    """Tests for positive_impact, negative_impact and debt_percentage."""

    def test_negative_impact_single_practice(self):
        tx = make_transaction(amount=100, unethical={"A": 25})
        assert negative_impact([tx]) == 25.0

    def test_positive_impact_single_practice(self):
        tx = make_transaction(amount=80, ethical={"Fair Trade": 50})
        assert positive_impact([tx]) == 40.0

    def test_impacts_sum_over_transactions(self):
        txs = [
            make_transaction(amount=100, unethical={"A": 10}),
            make_transaction(amount=200, unethical={"B": 5}, ethical={"C": 20}),
        ]

        assert negative_impact(txs) == pytest.approx(20.0)
        assert positive_impact(txs) == pytest.approx(40.0)
        assert net_societal_debt(txs) == pytest.approx(-20.0)

    def test_nan_and_out_of_range_weights_are_contained(self):
        """One bad weight must not poison the total."""
        txs = [
            make_transaction(amount=100, unethical={"A": float("nan")}),
            make_transaction(amount=100, unethical={"B": 150}),
            make_transaction(amount=100, unethical={"C": 10}),
        ]

        total = negative_impact(txs)

        assert math.isfinite(total)
        assert total == pytest.approx(10.0)

    def test_non_finite_amount_is_contained(self):
        txs = [
            make_transaction(amount=float("inf"), unethical={"A": 10}),
            make_transaction(amount=50, unethical={"A": 10}),
        ]

        assert negative_impact(txs) == pytest.approx(5.0)
        assert total_spent(txs) == pytest.approx(50.0)

    def test_unanalyzed_transaction_contributes_nothing(self):
        tx = Transaction(date="2025-03-01", merchant_name="X", amount=100)
        assert negative_impact([tx]) == 0.0
        assert positive_impact([tx]) == 0.0

    def test_debt_percentage(self):
        txs = [
            make_transaction(amount=50, unethical={"Factory Farming": 40}),
        ]
        assert debt_percentage(txs) == pytest.approx(40.0)

    def test_debt_percentage_zero_spend(self):
        assert debt_percentage([]) == 0.0
        assert debt_percentage([make_transaction(amount=0, unethical={"A": 50})]) == 0.0

    def test_transaction_societal_debt(self):
        tx = make_transaction(amount=100, unethical={"A": 30}, ethical={"B": 10})
        assert transaction_societal_debt(tx) == pytest.approx(20.0)


# =============================================================================
# Category Tests
# =============================================================================

class TestCategories:
    """Tests for by_category, top_categories and practice_totals."""

    def test_groups_by_declared_category(self):
        txs = [
            make_transaction(
                amount=100,
                unethical={"Factory Farming": 20, "Deforestation": 10},
                categories={"Factory Farming": "Animal Welfare", "Deforestation": "Environment"},
            ),
            make_transaction(
                amount=100,
                unethical={"Battery Cages": 5},
                categories={"Battery Cages": "Animal Welfare"},
            ),
        ]

        result = by_category(txs, is_positive=False)

        assert result == pytest.approx({"Animal Welfare": 25.0, "Environment": 10.0})

    def test_missing_category_uses_negative_sentinel(self):
        txs = [make_transaction(amount=100, unethical={"A": 10})]
        assert by_category(txs, is_positive=False) == {UNCATEGORIZED_NEGATIVE: 10.0}

    def test_missing_category_uses_positive_sentinel(self):
        txs = [make_transaction(amount=100, ethical={"B": 10}, categories={"B": "  "})]
        assert by_category(txs, is_positive=True) == {UNCATEGORIZED_POSITIVE: 10.0}

    def test_top_categories_ordered_and_limited(self):
        tx = make_transaction(
            amount=100,
            unethical={"A": 40, "B": 30, "C": 20, "D": 10},
            categories={"A": "Alpha", "B": "Beta", "C": "Gamma", "D": "Delta"},
        )

        result = top_categories([tx], is_positive=False)

        assert [name for name, _ in result] == ["Alpha", "Beta", "Gamma"]

    def test_practice_totals_net_out(self):
        txs = [
            make_transaction(amount=100, unethical={"Packaging": 10}),
            make_transaction(amount=100, ethical={"Packaging": 4}),
        ]

        assert practice_totals(txs) == pytest.approx({"Packaging": 6.0})


# =============================================================================
# Impact Summary Tests
# =============================================================================

class TestCalculateImpactAnalysis:
    """Tests for calculate_impact_analysis function."""

    def test_single_unethical_purchase(self):
        txs = [
            make_transaction(
                amount=50,
                unethical={"Factory Farming": 40},
                categories={"Factory Farming": "Animal Welfare"},
            ),
        ]

        analysis = calculate_impact_analysis(txs)

        assert analysis.negative_impact == pytest.approx(20.0)
        assert analysis.positive_impact == 0.0
        assert analysis.debt_percentage == pytest.approx(40.0)
        assert analysis.effective_debt == pytest.approx(20.0)
        assert analysis.available_credit == 0.0
        assert analysis.total_transactions == 1
        assert analysis.transactions_with_debt == 1
        assert analysis.transactions_with_credit == 0
        assert analysis.negative_categories == {"Animal Welfare": pytest.approx(20.0)}

    def test_applied_credit_reduces_available_and_debt(self):
        txs = [
            make_transaction(amount=100, unethical={"A": 20}),
            make_transaction(amount=100, ethical={"B": 15}),
        ]

        analysis = calculate_impact_analysis(txs, applied_credit=10)

        assert analysis.available_credit == pytest.approx(5.0)
        assert analysis.effective_debt == pytest.approx(10.0)
        assert analysis.available_credit + analysis.applied_credit == pytest.approx(
            analysis.positive_impact
        )

    def test_values_never_negative(self):
        txs = [make_transaction(amount=100, ethical={"B": 5})]

        analysis = calculate_impact_analysis(txs, applied_credit=50)

        assert analysis.available_credit == 0.0
        assert analysis.effective_debt == 0.0

    def test_invalid_applied_credit_treated_as_zero(self):
        txs = [make_transaction(amount=100, ethical={"B": 5})]

        analysis = calculate_impact_analysis(txs, applied_credit=float("nan"))

        assert analysis.applied_credit == 0.0
        assert analysis.available_credit == pytest.approx(5.0)

    def test_empty_list(self):
        analysis = calculate_impact_analysis([])

        assert analysis.positive_impact == 0.0
        assert analysis.negative_impact == 0.0
        assert analysis.debt_percentage == 0.0
        assert analysis.total_transactions == 0

    def test_to_dict_rounds_to_cents(self):
        txs = [make_transaction(amount=10, unethical={"A": 33.333})]

        data = calculate_impact_analysis(txs).to_dict()

        assert data["negative_impact"] == 3.33
