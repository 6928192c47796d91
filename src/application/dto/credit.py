"""Data transfer objects for credit ledger operations."""

import math
from dataclasses import dataclass
from typing import List

from src.domain.entities import CreditState, ImpactAnalysis


@dataclass(frozen=True)
class ApplyCreditRequest:
    """Input data for applying credit against debt."""
    user_id: str
    amount: float

    def validate(self) -> List[str]:
        errors = []

        if not self.user_id or not self.user_id.strip():
            errors.append("user_id is required")

        if not isinstance(self.amount, (int, float)) or not math.isfinite(self.amount):
            errors.append("amount must be a finite number")
        elif self.amount < 0:
            errors.append("amount must not be negative")

        return errors


@dataclass(frozen=True)
class CreditApplication:
    """
    Result of an apply-credit call.

    ``ok`` is False when nothing could be applied (no debt, no credit or a
    zero request). That is a normal outcome, not an error.
    """

    applied_amount: float
    ok: bool
    state: CreditState
    impact: ImpactAnalysis
