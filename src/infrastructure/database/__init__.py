"""Database infrastructure."""

from .connection import get_db_session, DatabaseSessionManager, db_manager
from .models import Base, CreditStateModel, TransactionBatchModel, VendorAnalysisModel

__all__ = [
    "get_db_session",
    "DatabaseSessionManager",
    "db_manager",
    "Base",
    "CreditStateModel",
    "TransactionBatchModel",
    "VendorAnalysisModel",
]
