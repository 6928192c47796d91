"""Transaction retrieval and refresh endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from src.application.services import AnalysisService
from src.core.dependencies import get_analysis_service
from src.presentation.schemas import (
    AnalysisResponseSchema,
    ErrorResponseSchema,
    LatestTransactionsResponseSchema,
    RefreshTransactionsRequestSchema,
    TransactionResponseSchema,
)
from src.service.impact import transaction_societal_debt

from .analysis import to_analysis_response

transactions_router = APIRouter(prefix="/transactions")


@transactions_router.get(
    "/latest",
    response_model=LatestTransactionsResponseSchema,
    summary="Get Latest Transactions",
    description="Return the transactions of the user's most recent analysis batch.",
)
async def get_latest_transactions(
    user_id: Annotated[
        str,
        Query(min_length=1, max_length=255, description="User ID"),
    ],
    analysis_service: Annotated[AnalysisService, Depends(get_analysis_service)],
) -> LatestTransactionsResponseSchema:
    transactions = await analysis_service.get_latest_transactions(user_id)

    return LatestTransactionsResponseSchema(
        user_id=user_id,
        transactions=[
            TransactionResponseSchema.from_entity(tx, transaction_societal_debt(tx))
            for tx in transactions
        ],
    )


@transactions_router.post(
    "/refresh",
    response_model=AnalysisResponseSchema,
    summary="Refresh From Bank",
    description="Fetch the user's transactions from the bank provider and analyze them.",
    responses={
        404: {"model": ErrorResponseSchema, "description": "User not found"},
        503: {"model": ErrorResponseSchema, "description": "Bank API unavailable"},
    },
)
async def refresh_transactions(
    request: RefreshTransactionsRequestSchema,
    analysis_service: Annotated[AnalysisService, Depends(get_analysis_service)],
) -> AnalysisResponseSchema:
    result = await analysis_service.refresh_from_bank(request.user_id)
    return to_analysis_response(result)
