"""Pydantic schemas for the enrichment provider's response."""

from typing import Any, Dict, List

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)


class EnrichmentEnvelopeSchema(BaseModel):
    """Top-level response: ``{"transactions": [...]}``."""

    model_config = ConfigDict(extra="ignore")

    transactions: List[Any]


class EnrichmentResultSchema(BaseModel):
    """
    One analyzed transaction.

    Accepts both snake_case and camelCase keys. Weights are kept as raw
    values so range problems can be clamped and reported downstream
    instead of rejecting the whole entry.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1)
    unethical_practices: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("unethical_practices", "unethicalPractices"),
    )
    ethical_practices: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("ethical_practices", "ethicalPractices"),
    )
    practice_weights: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("practice_weights", "practiceWeights"),
    )
    practice_categories: Dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("practice_categories", "practiceCategories"),
    )
    practice_search_terms: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("practice_search_terms", "practiceSearchTerms"),
    )
    information: Dict[str, Any] = Field(default_factory=dict)
    citations: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Providers sometimes echo numeric ids."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator(
        "unethical_practices",
        "ethical_practices",
        "practice_weights",
        "practice_categories",
        "practice_search_terms",
        "information",
        "citations",
        mode="before",
    )
    @classmethod
    def none_as_empty(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return [] if info.field_name.endswith("practices") else {}
        return v
