"""HTTP implementation of BankAPIClient."""

from typing import Any, Dict, List

import httpx
import structlog

from src.core.config import settings
from src.core.metrics import (
    track_bank_fetch_latency,
    record_bank_fetch_success,
    record_bank_fetch_failure,
)
from src.core.retry import RetryPolicy, retry_async
from src.domain.entities import Transaction
from src.domain.exceptions import (
    BankAPIException,
    BankAPITimeoutException,
    UserNotFoundException,
)
from src.domain.interfaces import BankAPIClient

logger = structlog.get_logger(__name__)

UNKNOWN_MERCHANT = "Unknown Merchant"


class HttpBankAPIClient(BankAPIClient):
    """
    HTTP client for the bank-transaction provider.

    Fetches raw transactions with bounded retries on timeouts and 5xx.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int = 3,
    ):
        self._base_url = base_url or settings.bank_api_url
        self._timeout = timeout or settings.bank_api_timeout
        self._policy = RetryPolicy(
            max_attempts=max_retries,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )

    async def get_transactions(self, user_id: str) -> List[Transaction]:
        """Fetch recent transactions for a user."""
        return await retry_async(
            lambda: self._fetch(user_id),
            policy=self._policy,
            operation_name="bank_get_transactions",
        )

    async def _fetch(self, user_id: str) -> List[Transaction]:
        url = f"{self._base_url}/bank/transactions"
        params = {"user_id": user_id}

        try:
            with track_bank_fetch_latency():
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=params)
        except httpx.TimeoutException:
            record_bank_fetch_failure("timeout")
            logger.warning("bank_api_timeout", user_id=user_id)
            raise BankAPITimeoutException()
        except httpx.TransportError as e:
            record_bank_fetch_failure("error")
            logger.error("bank_api_error", user_id=user_id, error=str(e))
            raise BankAPIException(message=f"Bank API unreachable: {e}") from e

        if response.status_code == 404:
            record_bank_fetch_failure("not_found")
            raise UserNotFoundException(user_id)

        if response.status_code >= 400:
            record_bank_fetch_failure("error")
            raise BankAPIException(
                message=f"Bank API error: {response.text[:200]}",
                status_code=response.status_code,
            )

        record_bank_fetch_success()
        return parse_bank_transactions(response.json())


def parse_bank_transactions(data: Dict[str, Any]) -> List[Transaction]:
    """
    Map the provider's raw transactions onto unanalyzed Transactions.

    The merchant falls back to the raw name, then "Unknown Merchant".
    Amounts are made positive since only spend is analyzed.
    """
    transactions = []

    for item in data.get("transactions", []):
        merchant = item.get("merchant_name") or item.get("name") or UNKNOWN_MERCHANT
        categories = item.get("category") or []
        if isinstance(categories, str):
            categories = [categories]

        transactions.append(
            Transaction(
                date=str(item.get("date", ""))[:10],
                merchant_name=merchant,
                amount=abs(float(item.get("amount", 0) or 0)),
                external_id=item.get("transaction_id"),
                provider_categories=[str(c) for c in categories],
            )
        )

    return transactions
