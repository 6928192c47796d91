"""Analysis API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.application.dto import AnalysisResult
from src.application.services import AnalysisService
from src.core.dependencies import get_analysis_service
from src.presentation.schemas import (
    AnalysisResponseSchema,
    AnalyzeRequestSchema,
    ErrorResponseSchema,
    TransactionResponseSchema,
    WarningSchema,
)
from src.service.impact import transaction_societal_debt

analysis_router = APIRouter(
    prefix="/analysis",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        503: {"model": ErrorResponseSchema, "description": "Store unavailable"},
    },
)


def to_analysis_response(result: AnalysisResult) -> AnalysisResponseSchema:
    """Render an AnalysisResult for the API."""
    return AnalysisResponseSchema(
        user_id=result.user_id,
        transactions=[
            TransactionResponseSchema.from_entity(tx, transaction_societal_debt(tx))
            for tx in result.transactions
        ],
        warnings=[WarningSchema(**w.to_dict()) for w in result.warnings],
        pending_count=result.pending_count,
        cache_hits=result.cache_hits,
        enriched=result.enriched,
        batch_id=str(result.batch_id) if result.batch_id else None,
    )


@analysis_router.post(
    "",
    response_model=AnalysisResponseSchema,
    status_code=200,
    summary="Analyze Transactions",
    description="""
    Reconcile transactions with the user's previous batch and fill in
    missing impact analysis from the vendor cache or the enrichment provider.

    Partial failures are reported in `warnings`; the response still carries
    every transaction, with unanalyzed ones counted in `pending_count`.
    """,
)
async def analyze_transactions(
    request: AnalyzeRequestSchema,
    analysis_service: Annotated[AnalysisService, Depends(get_analysis_service)],
) -> AnalysisResponseSchema:
    result = await analysis_service.analyze_batch(
        request.user_id,
        [tx.to_entity() for tx in request.transactions],
    )
    return to_analysis_response(result)
