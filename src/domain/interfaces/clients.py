"""External client interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from src.domain.entities import AnalysisWarning, Transaction


class BankAPIClient(ABC):
    """
    Abstract client for the bank-transaction provider.

    Returns raw, unanalyzed transactions.
    """

    @abstractmethod
    async def get_transactions(self, user_id: str) -> List[Transaction]:
        """
        Fetch recent transactions for a user.

        Args:
            user_id: The user's identifier

        Returns:
            Unanalyzed transactions with positive amounts

        Raises:
            UserNotFoundException: If the user doesn't exist
            BankAPIException: If the API returns an error
            BankAPITimeoutException: If the request times out
        """
        ...


@dataclass(frozen=True)
class EnrichmentStub:
    """What the enrichment provider is told about one transaction."""

    id: str
    date: str
    merchant_name: str
    amount: float
    categories: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "merchant_name": self.merchant_name,
            "amount": self.amount,
            "categories": list(self.categories),
        }


@dataclass(frozen=True)
class EnrichmentResult:
    """
    One analyzed transaction echoed back by the provider.

    Results are keyed by ``id``; the provider may reorder, drop or
    add entries relative to the request.
    """

    id: str
    unethical_practices: List[str] = field(default_factory=list)
    ethical_practices: List[str] = field(default_factory=list)
    practice_weights: dict = field(default_factory=dict)
    practice_categories: dict = field(default_factory=dict)
    practice_search_terms: dict = field(default_factory=dict)
    information: dict = field(default_factory=dict)
    citations: dict = field(default_factory=dict)


@dataclass(frozen=True)
class EnrichmentResponse:
    """Validated results plus warnings for entries that had to be skipped."""

    results: List[EnrichmentResult]
    warnings: List[AnalysisWarning] = field(default_factory=list)


class EnrichmentClient(ABC):
    """
    Abstract client for the external impact-analysis provider.

    The provider is slow and rate-limited. Callers send one batch per
    analysis pass.
    """

    @abstractmethod
    async def analyze(self, stubs: List[EnrichmentStub]) -> EnrichmentResponse:
        """
        Analyze a batch of transactions.

        Args:
            stubs: Transactions to analyze, each with a caller-chosen id

        Returns:
            Per-transaction results keyed by the echoed id

        Raises:
            EnrichmentUnavailableException: On connection errors or 429/5xx
            EnrichmentResponseException: If the payload fails validation
        """
        ...
