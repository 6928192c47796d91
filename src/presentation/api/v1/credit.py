"""Impact and credit ledger endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from src.application.services import CreditLedgerService
from src.core.dependencies import get_credit_service
from src.presentation.schemas import (
    ApplyCreditRequestSchema,
    ApplyCreditResponseSchema,
    CreditStateSchema,
    ErrorResponseSchema,
    ImpactRequestSchema,
    ImpactResponseSchema,
)

credit_router = APIRouter(
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        503: {"model": ErrorResponseSchema, "description": "Store unavailable"},
    },
)


@credit_router.post(
    "/impact",
    response_model=ImpactResponseSchema,
    summary="Compute Impact",
    description="""
    Aggregate positive and negative impact for a user and refresh the
    available credit stored in their ledger.
    """,
)
async def compute_impact(
    request: ImpactRequestSchema,
    credit_service: Annotated[CreditLedgerService, Depends(get_credit_service)],
) -> ImpactResponseSchema:
    transactions = (
        [tx.to_entity() for tx in request.transactions]
        if request.transactions is not None
        else None
    )
    analysis = await credit_service.get_impact(request.user_id, transactions)
    return ImpactResponseSchema.from_entity(analysis)


@credit_router.get(
    "/credit/{user_id}",
    response_model=CreditStateSchema,
    summary="Get Credit State",
)
async def get_credit_state(
    user_id: Annotated[str, Path(min_length=1, max_length=255)],
    credit_service: Annotated[CreditLedgerService, Depends(get_credit_service)],
) -> CreditStateSchema:
    state = await credit_service.get_credit_state(user_id)
    return CreditStateSchema.from_entity(state)


@credit_router.post(
    "/credit/apply",
    response_model=ApplyCreditResponseSchema,
    summary="Apply Credit",
    description="""
    Apply available credit against outstanding debt.

    Applies min(amount, available credit, remaining debt), evaluated
    against the user's latest saved batch. When that is zero the call
    returns `ok: false` and changes nothing.
    """,
)
async def apply_credit(
    request: ApplyCreditRequestSchema,
    credit_service: Annotated[CreditLedgerService, Depends(get_credit_service)],
) -> ApplyCreditResponseSchema:
    application = await credit_service.apply_credit(request.user_id, request.amount)

    return ApplyCreditResponseSchema(
        applied_amount=round(application.applied_amount, 2),
        ok=application.ok,
        credit_state=CreditStateSchema.from_entity(application.state),
        impact=ImpactResponseSchema.from_entity(application.impact),
    )
