"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from src.domain.exceptions import (
    DomainException,
    InvalidRequestException,
    BankAPIException,
    BankAPITimeoutException,
    ConcurrentCreditUpdateException,
    OperationTimeoutException,
    StoreUnavailableException,
    UserNotFoundException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": code,
            "message": message,
            "request_id": get_request_id(),
        },
    )


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    @app.exception_handler(InvalidRequestException)
    async def invalid_request_handler(
        request: Request,
        exc: InvalidRequestException,
    ) -> JSONResponse:
        """Handle caller contract violations."""
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(UserNotFoundException)
    async def user_not_found_handler(
        request: Request,
        exc: UserNotFoundException,
    ) -> JSONResponse:
        """Handle user not found errors."""
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(BankAPIException)
    async def bank_error_handler(
        request: Request,
        exc: BankAPIException,
    ) -> JSONResponse:
        """Handle bank API errors and timeouts."""
        timed_out = isinstance(exc, BankAPITimeoutException)
        logger.error(
            "bank_api_unavailable",
            code=exc.code,
            status_code=exc.status_code,
            timed_out=timed_out,
        )
        return _error_response(
            503,
            exc.code,
            "Bank provider unavailable. Please retry the refresh later.",
        )

    @app.exception_handler(StoreUnavailableException)
    @app.exception_handler(OperationTimeoutException)
    @app.exception_handler(ConcurrentCreditUpdateException)
    async def transient_error_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle transient failures that outlasted their retries."""
        logger.error(
            "transient_failure_exhausted",
            code=exc.code,
            message=exc.message,
        )
        return _error_response(
            503,
            exc.code,
            "Service temporarily unavailable. Please try again.",
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred.")
