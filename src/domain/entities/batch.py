"""Persisted snapshot of a user's analyzed transactions."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import UUID, uuid4

from .transaction import Transaction
from .vendor import utcnow


@dataclass
class TransactionBatch:
    """One analysis run's output for a user. Batches are append-only."""

    user_id: str
    transactions: List[Transaction]
    total_negative_impact: float = 0.0
    debt_percentage: float = 0.0
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
