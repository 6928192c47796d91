"""Domain Entities - Core business objects."""

from .batch import TransactionBatch
from .credit import CreditState
from .impact import ImpactAnalysis
from .transaction import AnalysisFields, Transaction
from .vendor import VendorAnalysis, utcnow
from .warning import AnalysisWarning, WarningCode

__all__ = [
    "AnalysisFields",
    "AnalysisWarning",
    "CreditState",
    "ImpactAnalysis",
    "Transaction",
    "TransactionBatch",
    "VendorAnalysis",
    "WarningCode",
    "utcnow",
]
