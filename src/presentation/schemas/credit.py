"""Impact and credit ledger Pydantic schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.entities import CreditState, ImpactAnalysis

from .transaction import TransactionSchema


class ImpactRequestSchema(BaseModel):
    """Schema for POST /v1/impact request body."""

    user_id: str = Field(..., min_length=1, max_length=255, examples=["user_123"])
    transactions: Optional[List[TransactionSchema]] = Field(
        None,
        description="Transactions to evaluate; defaults to the latest saved batch",
    )


class ImpactResponseSchema(BaseModel):
    """Derived impact totals."""

    positive_impact: float
    negative_impact: float
    net_societal_debt: float
    effective_debt: float
    available_credit: float
    applied_credit: float
    debt_percentage: float
    total_transactions: int
    transactions_with_debt: int
    transactions_with_credit: int
    negative_categories: Dict[str, float]
    positive_categories: Dict[str, float]

    @classmethod
    def from_entity(cls, analysis: ImpactAnalysis) -> "ImpactResponseSchema":
        return cls(**analysis.to_dict())


class CreditStateSchema(BaseModel):
    """A user's credit ledger state."""

    user_id: str
    available_credit: float
    applied_credit: float
    last_applied_amount: float
    last_applied_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, state: CreditState) -> "CreditStateSchema":
        return cls(
            user_id=state.user_id,
            available_credit=round(state.available_credit, 2),
            applied_credit=round(state.applied_credit, 2),
            last_applied_amount=round(state.last_applied_amount, 2),
            last_applied_at=state.last_applied_at,
        )


class ApplyCreditRequestSchema(BaseModel):
    """Schema for POST /v1/credit/apply request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "user_id": "user_123",
                    "amount": 10.0,
                }
            ]
        }
    )

    user_id: str = Field(..., min_length=1, max_length=255, examples=["user_123"])
    amount: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Amount of credit to apply",
        examples=[10.0],
    )

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        """Ensure user_id is not just whitespace."""
        if not v.strip():
            raise ValueError("user_id cannot be empty or whitespace")
        return v.strip()


class ApplyCreditResponseSchema(BaseModel):
    """Schema for POST /v1/credit/apply response body."""

    applied_amount: float = Field(..., ge=0)
    ok: bool = Field(..., description="False when nothing could be applied")
    credit_state: CreditStateSchema
    impact: ImpactResponseSchema
