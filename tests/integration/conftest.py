"""
Fixtures for integration tests.

Provides:
- Test client for FastAPI app
- Mock bank and enrichment clients
- In-memory vendor cache with failure injection
- In-memory SQLite database for repositories
"""

import asyncio
from datetime import timedelta
from typing import AsyncGenerator, Dict, List, Optional, Set

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.main import app
from src.application.services import (
    AnalysisService,
    CreditLedgerService,
    UserLockRegistry,
    VendorCacheOrchestrator,
)
from src.core.dependencies import (
    get_bank_client,
    get_credit_state_repository,
    get_enrichment_client,
    get_vendor_cache_repository,
)
from src.core.retry import RetryPolicy
from src.domain.entities import Transaction, TransactionBatch, VendorAnalysis
from src.domain.exceptions import (
    BankAPIException,
    StoreUnavailableException,
    UserNotFoundException,
)
from src.domain.interfaces import (
    BankAPIClient,
    EnrichmentClient,
    EnrichmentResponse,
    EnrichmentResult,
    EnrichmentStub,
    VendorCacheRepository,
)
from src.infrastructure.clients import parse_bank_transactions
from src.infrastructure.database import Base, get_db_session
from src.infrastructure.repositories import (
    PostgresCreditStateRepository,
    PostgresTransactionBatchRepository,
)


# =============================================================================
# Test Data
# =============================================================================

# Analysis the mock provider returns, keyed by lowercased merchant name
PROVIDER_ANALYSES: Dict[str, dict] = {
    "factory farms inc": {
        "unethical_practices": ["Factory Farming"],
        "ethical_practices": [],
        "practice_weights": {"Factory Farming": 40},
        "practice_categories": {"Factory Farming": "Animal Welfare"},
    },
    "green grocer": {
        "unethical_practices": [],
        "ethical_practices": ["Local Sourcing"],
        "practice_weights": {"Local Sourcing": 30},
        "practice_categories": {"Local Sourcing": "Community"},
    },
    "coffee co.": {
        "unethical_practices": ["Single-Use Plastics"],
        "ethical_practices": ["Fair Trade"],
        "practice_weights": {"Single-Use Plastics": 10, "Fair Trade": 20},
        "practice_categories": {
            "Single-Use Plastics": "Environment",
            "Fair Trade": "Labor",
        },
    },
}

DEFAULT_ANALYSIS = {
    "unethical_practices": ["Opaque Supply Chain"],
    "ethical_practices": [],
    "practice_weights": {"Opaque Supply Chain": 5},
    "practice_categories": {"Opaque Supply Chain": "Transparency"},
}

BANK_FEEDS: Dict[str, List[dict]] = {
    "user_bank": [
        {
            "transaction_id": "plaid-1",
            "merchant_name": "Factory Farms Inc",
            "name": "FACTORY FARMS INC 0042",
            "amount": 50.0,
            "date": "2025-03-01",
            "category": ["Food and Drink", "Groceries"],
        },
        {
            "transaction_id": "plaid-2",
            "merchant_name": None,
            "name": "Green Grocer",
            "amount": -20.0,
            "date": "2025-03-02",
            "category": ["Food and Drink"],
        },
    ],
}


def make_transaction(
    merchant: str = "Factory Farms Inc",
    amount: float = 50.0,
    date: str = "2025-03-01",
    external_id: Optional[str] = None,
    **analysis,
) -> Transaction:
    """Helper to create a transaction, analyzed when practice data is given."""
    return Transaction(
        date=date,
        merchant_name=merchant,
        amount=amount,
        external_id=external_id,
        analyzed=bool(analysis),
        **analysis,
    )


async def save_batch(session: AsyncSession, user_id: str, transactions: List[Transaction]) -> None:
    """Persist and commit a batch so the credit ledger reads it as the latest."""
    await PostgresTransactionBatchRepository(session).save(
        TransactionBatch(user_id=user_id, transactions=transactions)
    )
    await session.commit()


# =============================================================================
# Mock Clients
# =============================================================================

class MockBankAPIClient(BankAPIClient):
    """Mock bank client that maps canned raw feeds through the real parser."""

    def __init__(self, fail_mode: bool = False):
        self.fail_mode = fail_mode
        self.call_count = 0

    async def get_transactions(self, user_id: str) -> List[Transaction]:
        self.call_count += 1

        if self.fail_mode:
            raise BankAPIException(message="Bank API unavailable", status_code=500)

        if user_id not in BANK_FEEDS:
            raise UserNotFoundException(user_id)

        return parse_bank_transactions({"transactions": BANK_FEEDS[user_id]})


class MockEnrichmentClient(EnrichmentClient):
    """
    Mock enrichment provider.

    Answers from PROVIDER_ANALYSES and records every batch it receives.
    ``drop_ids`` simulates results missing from the response, ``error``
    is raised instead of answering, and ``delay`` holds the call open.
    """

    def __init__(
        self,
        drop_ids: Optional[Set[str]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        extra_results: Optional[List[EnrichmentResult]] = None,
    ):
        self.drop_ids = drop_ids or set()
        self.error = error
        self.delay = delay
        self.extra_results = extra_results or []
        self.calls: List[List[EnrichmentStub]] = []
        self.cancelled = False

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def analyze(self, stubs: List[EnrichmentStub]) -> EnrichmentResponse:
        self.calls.append(list(stubs))

        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise

        if self.error is not None:
            raise self.error

        results = []
        # Reversed on purpose: results must be matched by id, not position
        for stub in reversed(stubs):
            if stub.id in self.drop_ids:
                continue
            analysis = PROVIDER_ANALYSES.get(stub.merchant_name.strip().lower(), DEFAULT_ANALYSIS)
            results.append(EnrichmentResult(id=stub.id, **analysis))

        return EnrichmentResponse(results=[*results, *self.extra_results])


class InMemoryVendorCache(VendorCacheRepository):
    """Vendor cache held in a dict, with optional failure injection."""

    def __init__(self, fail_reads: bool = False, fail_writes: bool = False):
        self.entries: Dict[str, VendorAnalysis] = {}
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.reads: List[str] = []
        self.writes: List[str] = []

    async def get(self, vendor_key: str) -> Optional[VendorAnalysis]:
        self.reads.append(vendor_key)
        if self.fail_reads:
            raise StoreUnavailableException("vendor_cache_get", "connection refused")
        return self.entries.get(vendor_key)

    async def upsert(self, entry: VendorAnalysis) -> VendorAnalysis:
        self.writes.append(entry.vendor_key)
        if self.fail_writes:
            raise StoreUnavailableException("vendor_cache_upsert", "connection refused")
        self.entries[entry.vendor_key] = entry
        return entry


# Retries without sleeping
FAST_RETRY = RetryPolicy(max_attempts=3, base_delay=0, max_delay=0, attempt_timeout=1.0)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def test_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


# =============================================================================
# Mock Client Fixtures
# =============================================================================

@pytest.fixture
def mock_bank_client() -> MockBankAPIClient:
    """Create a mock bank client."""
    return MockBankAPIClient()


@pytest.fixture
def mock_enrichment_client() -> MockEnrichmentClient:
    """Create a mock enrichment client."""
    return MockEnrichmentClient()


@pytest.fixture
def vendor_cache() -> InMemoryVendorCache:
    """Create an empty in-memory vendor cache."""
    return InMemoryVendorCache()


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def orchestrator(
    vendor_cache: InMemoryVendorCache,
    mock_enrichment_client: MockEnrichmentClient,
) -> VendorCacheOrchestrator:
    """Orchestrator over the in-memory cache and mock provider."""
    return VendorCacheOrchestrator(
        vendor_cache=vendor_cache,
        enrichment_client=mock_enrichment_client,
        lookup_concurrency=4,
        enrichment_timeout=2.0,
        cache_ttl=timedelta(days=90),
        store_policy=FAST_RETRY,
        enrichment_policy=RetryPolicy(max_attempts=2, base_delay=0, max_delay=0),
    )


@pytest.fixture
def analysis_service(
    test_session: AsyncSession,
    orchestrator: VendorCacheOrchestrator,
    mock_bank_client: MockBankAPIClient,
) -> AnalysisService:
    """Analysis service over SQLite batches."""
    return AnalysisService(
        batch_repository=PostgresTransactionBatchRepository(test_session),
        orchestrator=orchestrator,
        bank_client=mock_bank_client,
        store_policy=FAST_RETRY,
    )


@pytest.fixture
def credit_service(
    test_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
) -> CreditLedgerService:
    """Credit ledger over SQLite state and batches."""
    return CreditLedgerService(
        credit_repository=PostgresCreditStateRepository(session_factory),
        batch_repository=PostgresTransactionBatchRepository(test_session),
        lock_registry=UserLockRegistry(),
        store_policy=FAST_RETRY,
    )


# =============================================================================
# App Client Fixtures
# =============================================================================

async def _open_client(
    session_factory: async_sessionmaker[AsyncSession],
    bank_client: BankAPIClient,
    enrichment_client: EnrichmentClient,
    vendor_cache: VendorCacheRepository,
) -> AsyncClient:
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_credit_state_repository] = (
        lambda: PostgresCreditStateRepository(session_factory)
    )
    app.dependency_overrides[get_bank_client] = lambda: bank_client
    app.dependency_overrides[get_enrichment_client] = lambda: enrichment_client
    app.dependency_overrides[get_vendor_cache_repository] = lambda: vendor_cache

    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    mock_bank_client: MockBankAPIClient,
    mock_enrichment_client: MockEnrichmentClient,
    vendor_cache: InMemoryVendorCache,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with mocked dependencies.

    This client:
    - Uses an in-memory SQLite database, committed per request
    - Mocks the bank and enrichment providers
    - Keeps the vendor cache in memory
    """
    ac = await _open_client(session_factory, mock_bank_client, mock_enrichment_client, vendor_cache)
    async with ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client_with_failing_bank(
    session_factory: async_sessionmaker[AsyncSession],
    mock_enrichment_client: MockEnrichmentClient,
    vendor_cache: InMemoryVendorCache,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client where the bank API always fails."""
    ac = await _open_client(
        session_factory,
        MockBankAPIClient(fail_mode=True),
        mock_enrichment_client,
        vendor_cache,
    )
    async with ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Helper Fixtures
# =============================================================================

@pytest.fixture
def factory_farm_purchase() -> dict:
    """Request body transaction with a known unethical practice."""
    return {
        "date": "2025-03-01",
        "merchant_name": "Factory Farms Inc",
        "amount": 50.0,
        "external_id": "t1",
    }


@pytest.fixture
def grocer_purchase() -> dict:
    """Request body transaction with a known ethical practice."""
    return {
        "date": "2025-03-02",
        "merchant_name": "Green Grocer",
        "amount": 50.0,
        "external_id": "t2",
    }
