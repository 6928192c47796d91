"""
Impact aggregation for the Impact Ledger.

Turns per-transaction practice data into totals:
- Positive impact (credit earned through ethical practices)
- Negative impact (societal debt from unethical practices)
- Debt percentage of total spend
- Per-category and per-practice breakdowns

Every function is pure. A single malformed field contributes 0 instead
of turning a total into NaN.
"""

import math
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from src.domain.entities import ImpactAnalysis, Transaction

UNCATEGORIZED_POSITIVE = "Uncategorized Positive"
UNCATEGORIZED_NEGATIVE = "Uncategorized Negative"


def _finite(value: object) -> float:
    """Coerce to float, mapping anything non-numeric or non-finite to 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def valid_weight(weight: object) -> float:
    """
    Return a usable practice weight.

    Weights outside [0, 100], non-numeric or non-finite values
    contribute nothing.
    """
    value = _finite(weight)
    if value < 0 or value > 100:
        return 0.0
    return value


def practice_contribution(tx: Transaction, practice: str) -> float:
    """Amount of ``tx`` attributed to ``practice``: amount * weight / 100."""
    amount = _finite(tx.amount)
    weight = valid_weight(tx.practice_weights.get(practice, 0))
    contribution = amount * weight / 100
    return contribution if math.isfinite(contribution) else 0.0


def _practice_amounts(
    txs: Iterable[Transaction],
    is_positive: bool,
) -> Iterable[Tuple[Transaction, str, float]]:
    for tx in txs:
        practices = tx.ethical_practices if is_positive else tx.unethical_practices
        for practice in practices:
            yield tx, practice, practice_contribution(tx, practice)


def positive_impact(txs: Iterable[Transaction]) -> float:
    """
    Sum of amount * weight / 100 over every ethical practice.

    Args:
        txs: Transactions, analyzed or not

    Returns:
        Total credit earned (>= 0)
    """
    return sum(amount for _, _, amount in _practice_amounts(txs, is_positive=True))


def negative_impact(txs: Iterable[Transaction]) -> float:
    """
    Sum of amount * weight / 100 over every unethical practice.

    Example:
        amount=100, unethical=["A"], weights={"A": 25} -> 25.0
    """
    return sum(amount for _, _, amount in _practice_amounts(txs, is_positive=False))


def total_spent(txs: Iterable[Transaction]) -> float:
    """Sum of all finite transaction amounts."""
    return sum(_finite(tx.amount) for tx in txs)


def debt_percentage(txs: Sequence[Transaction]) -> float:
    """
    Negative impact as a percentage of total spend.

    Returns 0 when nothing was spent.
    """
    spent = total_spent(txs)
    if spent <= 0:
        return 0.0
    return negative_impact(txs) / spent * 100


def net_societal_debt(txs: Sequence[Transaction]) -> float:
    """Negative impact minus positive impact. Negative means net credit."""
    return negative_impact(txs) - positive_impact(txs)


def transaction_societal_debt(tx: Transaction) -> float:
    """Net debt contributed by one transaction."""
    return negative_impact([tx]) - positive_impact([tx])


def by_category(txs: Iterable[Transaction], is_positive: bool) -> Dict[str, float]:
    """
    Group practice contributions by each practice's declared category.

    Practices with no declared category fall into the
    "Uncategorized Positive" / "Uncategorized Negative" sentinel.

    Args:
        txs: Transactions to group
        is_positive: True for ethical practices, False for unethical

    Returns:
        Mapping of category -> summed contribution
    """
    fallback = UNCATEGORIZED_POSITIVE if is_positive else UNCATEGORIZED_NEGATIVE
    totals: Dict[str, float] = defaultdict(float)

    for tx, practice, amount in _practice_amounts(txs, is_positive):
        category = tx.practice_categories.get(practice)
        if not isinstance(category, str) or not category.strip():
            category = fallback
        totals[category] += amount

    return dict(totals)


def top_categories(
    txs: Iterable[Transaction],
    is_positive: bool,
    limit: int = 3,
) -> List[Tuple[str, float]]:
    """Largest categories by contribution, biggest first."""
    grouped = by_category(txs, is_positive)
    ranked = sorted(grouped.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:limit]


def practice_totals(txs: Iterable[Transaction]) -> Dict[str, float]:
    """
    Net contribution per practice.

    Unethical practices count as positive debt, ethical ones as negative,
    so a practice appearing on both sides nets out.
    """
    totals: Dict[str, float] = defaultdict(float)
    txs = list(txs)

    for _, practice, amount in _practice_amounts(txs, is_positive=False):
        totals[practice] += amount
    for _, practice, amount in _practice_amounts(txs, is_positive=True):
        totals[practice] -= amount

    return dict(totals)


def calculate_impact_analysis(
    txs: Sequence[Transaction],
    applied_credit: float = 0.0,
) -> ImpactAnalysis:
    """
    Build the full impact summary for a transaction list.

    Credit already applied is subtracted from both the available credit
    and the remaining debt, so available + applied equals the positive
    impact earned by ``txs``.

    Args:
        txs: The user's current transactions
        applied_credit: Credit the user has already applied

    Returns:
        ImpactAnalysis with totals, counters and category breakdowns
    """
    applied = max(0.0, _finite(applied_credit))
    positive = positive_impact(txs)
    negative = negative_impact(txs)

    with_debt = 0
    with_credit = 0
    for tx in txs:
        net = transaction_societal_debt(tx)
        if net > 0:
            with_debt += 1
        elif net < 0:
            with_credit += 1

    return ImpactAnalysis(
        positive_impact=positive,
        negative_impact=negative,
        net_societal_debt=negative - positive,
        effective_debt=max(0.0, negative - applied),
        available_credit=max(0.0, positive - applied),
        applied_credit=applied,
        debt_percentage=debt_percentage(txs),
        total_transactions=len(txs),
        transactions_with_debt=with_debt,
        transactions_with_credit=with_credit,
        negative_categories=by_category(txs, is_positive=False),
        positive_categories=by_category(txs, is_positive=True),
    )
