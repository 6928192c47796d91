"""HTTP implementation of EnrichmentClient."""

from typing import Any, List

import httpx
import structlog
from pydantic import ValidationError

from src.core.config import settings
from src.domain.entities import AnalysisWarning, WarningCode
from src.domain.exceptions import (
    EnrichmentResponseException,
    EnrichmentTimeoutException,
    EnrichmentUnavailableException,
)
from src.domain.interfaces import (
    EnrichmentClient,
    EnrichmentResponse,
    EnrichmentResult,
    EnrichmentStub,
)

from .enrichment_schemas import EnrichmentEnvelopeSchema, EnrichmentResultSchema

logger = structlog.get_logger(__name__)


class HttpEnrichmentClient(EnrichmentClient):
    """
    HTTP client for the impact-analysis provider.

    Posts one batch as ``{"transactions": [...]}`` and validates the
    response strictly before anything reaches the domain.
    """

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        self._url = url or settings.enrichment_api_url
        self._api_key = api_key if api_key is not None else settings.enrichment_api_key
        self._timeout = timeout or settings.enrichment_timeout

    async def analyze(self, stubs: List[EnrichmentStub]) -> EnrichmentResponse:
        """Send one batch to the provider and parse its answer."""
        if not stubs:
            return EnrichmentResponse(results=[])

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        payload = {"transactions": [stub.to_dict() for stub in stubs]}

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._url, json=payload, headers=headers)
        except httpx.TimeoutException:
            raise EnrichmentTimeoutException(self._timeout)
        except httpx.TransportError as e:
            raise EnrichmentUnavailableException(f"Enrichment provider unreachable: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            raise EnrichmentUnavailableException(
                f"Enrichment provider returned {response.status_code}",
                status_code=response.status_code,
            )

        if response.status_code >= 400:
            logger.error(
                "enrichment_request_rejected",
                status_code=response.status_code,
                response=response.text[:200],
            )
            raise EnrichmentResponseException(
                f"Enrichment provider rejected the batch with {response.status_code}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise EnrichmentResponseException("Enrichment response is not valid JSON") from e

        return parse_enrichment_payload(body)


def parse_enrichment_payload(payload: Any) -> EnrichmentResponse:
    """
    Validate a provider payload.

    A payload without a ``transactions`` list fails the whole batch.
    Individual entries that fail validation are skipped and reported,
    so one bad entry cannot sink the rest.

    Raises:
        EnrichmentResponseException: If the envelope itself is malformed
    """
    try:
        envelope = EnrichmentEnvelopeSchema.model_validate(payload)
    except ValidationError as e:
        raise EnrichmentResponseException(
            f"Malformed enrichment response: {e.error_count()} validation error(s)"
        ) from e

    results: List[EnrichmentResult] = []
    warnings: List[AnalysisWarning] = []

    for index, item in enumerate(envelope.transactions):
        try:
            parsed = EnrichmentResultSchema.model_validate(item)
        except ValidationError as e:
            raw_id = item.get("id") if isinstance(item, dict) else None
            logger.warning(
                "enrichment_result_invalid",
                index=index,
                result_id=raw_id,
                errors=e.error_count(),
            )
            warnings.append(
                AnalysisWarning(
                    code=WarningCode.INVALID_RESULT,
                    message=f"Enrichment result #{index} failed validation",
                    transaction_ids=[str(raw_id)] if raw_id else [],
                )
            )
            continue

        results.append(_to_result(parsed))

    return EnrichmentResponse(results=results, warnings=warnings)


def _to_result(parsed: EnrichmentResultSchema) -> EnrichmentResult:
    return EnrichmentResult(
        id=parsed.id,
        unethical_practices=list(parsed.unethical_practices),
        ethical_practices=list(parsed.ethical_practices),
        practice_weights=dict(parsed.practice_weights),
        practice_categories=dict(parsed.practice_categories),
        practice_search_terms=dict(parsed.practice_search_terms),
        information=dict(parsed.information),
        citations=dict(parsed.citations),
    )
