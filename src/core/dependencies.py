"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database import db_manager, get_db_session
from src.infrastructure.repositories import (
    PostgresCreditStateRepository,
    PostgresTransactionBatchRepository,
    PostgresVendorCacheRepository,
)
from src.infrastructure.clients import (
    HttpBankAPIClient,
    HttpEnrichmentClient,
)
from src.application.services import (
    AnalysisService,
    CreditLedgerService,
    UserLockRegistry,
    VendorCacheOrchestrator,
)

# Shared by every request so per-user serialization holds process-wide
user_locks = UserLockRegistry()


# Repository dependencies
def get_credit_state_repository() -> PostgresCreditStateRepository:
    """Get a CreditStateRepository that commits each write on its own."""
    return PostgresCreditStateRepository(db_manager.session_factory)


async def get_transaction_batch_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresTransactionBatchRepository:
    """Get a TransactionBatchRepository instance."""
    return PostgresTransactionBatchRepository(session)


def get_vendor_cache_repository() -> PostgresVendorCacheRepository:
    """Get a VendorCacheRepository backed by short independent sessions."""
    return PostgresVendorCacheRepository(db_manager.session_factory)


# External client dependencies
def get_bank_client() -> HttpBankAPIClient:
    """Get a BankAPIClient instance."""
    return HttpBankAPIClient()


def get_enrichment_client() -> HttpEnrichmentClient:
    """Get an EnrichmentClient instance."""
    return HttpEnrichmentClient()


def get_user_locks() -> UserLockRegistry:
    """Get the process-wide per-user lock registry."""
    return user_locks


# Service dependencies
def get_orchestrator(
    vendor_cache: Annotated[PostgresVendorCacheRepository, Depends(get_vendor_cache_repository)],
    enrichment_client: Annotated[HttpEnrichmentClient, Depends(get_enrichment_client)],
) -> VendorCacheOrchestrator:
    """Get a VendorCacheOrchestrator instance."""
    return VendorCacheOrchestrator(
        vendor_cache=vendor_cache,
        enrichment_client=enrichment_client,
    )


async def get_analysis_service(
    batch_repo: Annotated[PostgresTransactionBatchRepository, Depends(get_transaction_batch_repository)],
    orchestrator: Annotated[VendorCacheOrchestrator, Depends(get_orchestrator)],
    bank_client: Annotated[HttpBankAPIClient, Depends(get_bank_client)],
) -> AnalysisService:
    """Get an AnalysisService instance with all dependencies."""
    return AnalysisService(
        batch_repository=batch_repo,
        orchestrator=orchestrator,
        bank_client=bank_client,
    )


async def get_credit_service(
    credit_repo: Annotated[PostgresCreditStateRepository, Depends(get_credit_state_repository)],
    batch_repo: Annotated[PostgresTransactionBatchRepository, Depends(get_transaction_batch_repository)],
    lock_registry: Annotated[UserLockRegistry, Depends(get_user_locks)],
) -> CreditLedgerService:
    """Get a CreditLedgerService instance."""
    return CreditLedgerService(
        credit_repository=credit_repo,
        batch_repository=batch_repo,
        lock_registry=lock_registry,
    )
