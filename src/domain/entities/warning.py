"""Non-fatal problems reported alongside a partial result."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class WarningCode(str, Enum):
    """Reasons a transaction could not be fully analyzed or persisted."""

    ENRICHMENT_TIMEOUT = "ENRICHMENT_TIMEOUT"
    ENRICHMENT_UNAVAILABLE = "ENRICHMENT_UNAVAILABLE"
    ENRICHMENT_INVALID_RESPONSE = "ENRICHMENT_INVALID_RESPONSE"
    ENRICHMENT_PARTIAL = "ENRICHMENT_PARTIAL"
    INVALID_RESULT = "INVALID_RESULT"
    WEIGHT_CLAMPED = "WEIGHT_CLAMPED"
    CACHE_LOOKUP_FAILED = "CACHE_LOOKUP_FAILED"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"
    HISTORY_LOAD_FAILED = "HISTORY_LOAD_FAILED"
    BATCH_SAVE_FAILED = "BATCH_SAVE_FAILED"


@dataclass(frozen=True)
class AnalysisWarning:
    """A structured warning naming the affected transaction identities."""

    code: WarningCode
    message: str
    transaction_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "transaction_ids": list(self.transaction_ids),
        }
