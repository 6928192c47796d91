"""Data Transfer Objects for the application layer."""

from .analysis import AnalysisResult, AnalyzeBatchRequest, EnrichmentOutcome
from .credit import ApplyCreditRequest, CreditApplication

__all__ = [
    "AnalysisResult",
    "AnalyzeBatchRequest",
    "EnrichmentOutcome",
    "ApplyCreditRequest",
    "CreditApplication",
]
