"""
Transaction identity and merge for the Impact Ledger.

Bank feeds are re-fetched on every refresh, so the same purchase arrives
many times. This module decides when two records describe the same
purchase and reconciles an older list with a newer one without losing
analysis that was already paid for.
"""

from typing import Dict, Iterable, List

from src.domain.entities import Transaction

EXTERNAL_ID_PREFIX = "ext:"


def identify(tx: Transaction) -> str:
    """
    Compute the stable identity of a transaction.

    Algorithm:
        1. If the provider assigned an id, use it, namespaced with "ext:"
        2. Otherwise build "<date>-<MERCHANT>-<amount:.2f>" from the
           trimmed, uppercased merchant name

    The fallback is an approximation: two genuine purchases at the same
    merchant, on the same day, for the same amount share one identity and
    collapse into a single transaction.

    Args:
        tx: Transaction to identify

    Returns:
        Identity string, deterministic for equal inputs
    """
    if tx.external_id and tx.external_id.strip():
        return f"{EXTERNAL_ID_PREFIX}{tx.external_id.strip()}"

    return f"{tx.date}-{tx.merchant_name.strip().upper()}-{tx.amount:.2f}"


def _prefer(current: Transaction, candidate: Transaction) -> Transaction:
    """Pick which of two same-identity transactions to keep."""
    if current.analyzed and not candidate.analyzed:
        return current
    return candidate


def merge(base: Iterable[Transaction], incoming: Iterable[Transaction]) -> List[Transaction]:
    """
    Merge two transaction lists into one list of distinct identities.

    Tie-break when an identity appears in both lists:
        - the analyzed version wins
        - if both or neither are analyzed, the incoming version wins

    Duplicates inside a single list are resolved with the same rule.

    Result order is the insertion order of ``base`` followed by identities
    first seen in ``incoming``.

    Properties:
        - merge(x, x) == x for lists without repeated identities
        - an identity analyzed in ``base`` stays analyzed in the result

    Args:
        base: Previously known transactions
        incoming: Newer observations

    Returns:
        New list; inputs are not modified
    """
    merged: Dict[str, Transaction] = {}

    for tx in base:
        key = identify(tx)
        merged[key] = _prefer(merged[key], tx) if key in merged else tx

    for tx in incoming:
        key = identify(tx)
        merged[key] = _prefer(merged[key], tx) if key in merged else tx

    return list(merged.values())


def deduplicate(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Keep the first occurrence of each identity."""
    seen: Dict[str, Transaction] = {}
    for tx in transactions:
        seen.setdefault(identify(tx), tx)
    return list(seen.values())
