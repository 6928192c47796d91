"""Transaction-related Pydantic schemas."""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities import Transaction
from src.service.transactions import identify


class TransactionSchema(BaseModel):
    """A transaction as sent by callers, analyzed or not."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "date": "2025-03-14",
                    "merchant_name": "Coffee Co.",
                    "amount": 4.5,
                    "external_id": "txn_8c1f",
                }
            ]
        }
    )

    date: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="Transaction date (YYYY-MM-DD)",
        examples=["2025-03-14"],
    )
    merchant_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Merchant as reported by the bank",
        examples=["Coffee Co."],
    )
    amount: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Positive amount in the account currency",
        examples=[4.5],
    )
    analyzed: bool = False
    unethical_practices: List[str] = Field(default_factory=list)
    ethical_practices: List[str] = Field(default_factory=list)
    practice_weights: Dict[str, Annotated[float, Field(allow_inf_nan=False)]] = Field(
        default_factory=dict,
        description="Percent (0-100) of amount attributed to each practice",
    )
    practice_categories: Dict[str, str] = Field(default_factory=dict)
    practice_search_terms: Dict[str, Any] = Field(default_factory=dict)
    information: Dict[str, Any] = Field(default_factory=dict)
    citations: Dict[str, Any] = Field(default_factory=dict)
    external_id: Optional[str] = Field(
        None,
        max_length=255,
        description="Provider-assigned transaction id",
    )
    provider_categories: List[str] = Field(default_factory=list)

    def to_entity(self) -> Transaction:
        """Convert to the domain entity."""
        return Transaction(
            date=self.date,
            merchant_name=self.merchant_name,
            amount=self.amount,
            analyzed=self.analyzed,
            unethical_practices=list(self.unethical_practices),
            ethical_practices=list(self.ethical_practices),
            practice_weights=dict(self.practice_weights),
            practice_categories=dict(self.practice_categories),
            practice_search_terms=dict(self.practice_search_terms),
            information=dict(self.information),
            citations=dict(self.citations),
            external_id=self.external_id,
            provider_categories=list(self.provider_categories),
        )


class TransactionResponseSchema(TransactionSchema):
    """A transaction with its derived identity and net societal debt."""

    id: str = Field(..., description="Stable transaction identity")
    societal_debt: float = Field(
        0.0,
        description="Negative minus positive impact of this transaction",
    )

    @classmethod
    def from_entity(cls, tx: Transaction, societal_debt: float = 0.0) -> "TransactionResponseSchema":
        return cls(id=identify(tx), societal_debt=round(societal_debt, 2), **tx.to_dict())


class LatestTransactionsResponseSchema(BaseModel):
    """Schema for GET /v1/transactions/latest response."""

    user_id: str
    transactions: List[TransactionResponseSchema]


class RefreshTransactionsRequestSchema(BaseModel):
    """Schema for POST /v1/transactions/refresh request body."""

    user_id: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User whose bank transactions should be re-fetched",
        examples=["user_123"],
    )
