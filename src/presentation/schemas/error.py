"""Pydantic schema for API error responses."""

from pydantic import BaseModel, Field


class ErrorResponseSchema(BaseModel):
    """Standard error response format for all API errors."""
    error: str = Field(
        ...,
        description="Error code",
        examples=["INVALID_REQUEST"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["amount must not be negative"],
    )
    request_id: str | None = Field(
        None,
        description="Request ID for tracing",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "STORE_UNAVAILABLE",
                    "message": "Service temporarily unavailable. Please try again.",
                    "request_id": "abc123",
                }
            ]
        }
    }
