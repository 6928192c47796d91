"""External API client implementations."""

from .bank_client import HttpBankAPIClient, parse_bank_transactions
from .enrichment_client import HttpEnrichmentClient, parse_enrichment_payload

__all__ = [
    "HttpBankAPIClient",
    "HttpEnrichmentClient",
    "parse_bank_transactions",
    "parse_enrichment_payload",
]
