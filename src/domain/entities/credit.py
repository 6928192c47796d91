"""Per-user credit ledger state."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .vendor import utcnow


@dataclass
class CreditState:
    """
    Available and applied credit for one user.

    ``version`` increments on every persisted change and guards
    read-modify-write cycles against concurrent writers. ``last_apply_id``
    names the apply call that last moved credit, so a retried call can
    tell whether its own write already landed.
    """

    user_id: str
    available_credit: float = 0.0
    applied_credit: float = 0.0
    last_applied_amount: float = 0.0
    last_applied_at: Optional[datetime] = None
    last_apply_id: Optional[str] = None
    version: int = 0
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "available_credit": round(self.available_credit, 2),
            "applied_credit": round(self.applied_credit, 2),
            "last_applied_amount": round(self.last_applied_amount, 2),
            "last_applied_at": (
                self.last_applied_at.isoformat() if self.last_applied_at else None
            ),
        }
