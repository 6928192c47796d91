"""Pydantic schemas for API request/response validation."""

from .analysis import AnalysisResponseSchema, AnalyzeRequestSchema, WarningSchema
from .credit import (
    ApplyCreditRequestSchema,
    ApplyCreditResponseSchema,
    CreditStateSchema,
    ImpactRequestSchema,
    ImpactResponseSchema,
)
from .error import ErrorResponseSchema
from .transaction import (
    LatestTransactionsResponseSchema,
    RefreshTransactionsRequestSchema,
    TransactionResponseSchema,
    TransactionSchema,
)

__all__ = [
    "AnalysisResponseSchema",
    "AnalyzeRequestSchema",
    "WarningSchema",
    "ApplyCreditRequestSchema",
    "ApplyCreditResponseSchema",
    "CreditStateSchema",
    "ImpactRequestSchema",
    "ImpactResponseSchema",
    "ErrorResponseSchema",
    "LatestTransactionsResponseSchema",
    "RefreshTransactionsRequestSchema",
    "TransactionResponseSchema",
    "TransactionSchema",
]
