"""Analysis-related Pydantic schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .transaction import TransactionResponseSchema, TransactionSchema


class AnalyzeRequestSchema(BaseModel):
    """Schema for POST /v1/analysis request body."""

    user_id: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Unique identifier for the user",
        examples=["user_123"],
    )
    transactions: List[TransactionSchema] = Field(
        default_factory=list,
        description="Newly fetched transactions to reconcile and analyze",
    )

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        """Ensure user_id is not just whitespace."""
        if not v.strip():
            raise ValueError("user_id cannot be empty or whitespace")
        return v.strip()


class WarningSchema(BaseModel):
    """A non-fatal problem encountered while analyzing."""

    code: str = Field(..., examples=["ENRICHMENT_PARTIAL"])
    message: str
    transaction_ids: List[str] = Field(default_factory=list)


class AnalysisResponseSchema(BaseModel):
    """Schema for analysis responses."""

    user_id: str
    transactions: List[TransactionResponseSchema]
    warnings: List[WarningSchema] = Field(default_factory=list)
    pending_count: int = Field(
        ...,
        ge=0,
        description="Transactions still waiting for analysis",
    )
    cache_hits: int = Field(..., ge=0)
    enriched: int = Field(..., ge=0)
    batch_id: Optional[str] = Field(
        None,
        description="UUID of the persisted batch (null if saving failed)",
    )
