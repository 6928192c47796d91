"""Application services (use cases)."""

from .analysis_service import AnalysisService
from .credit_service import CreditLedgerService
from .enrichment_orchestrator import VendorCacheOrchestrator, sanitize_weights
from .locks import UserLockRegistry

__all__ = [
    "AnalysisService",
    "CreditLedgerService",
    "VendorCacheOrchestrator",
    "UserLockRegistry",
    "sanitize_weights",
]
