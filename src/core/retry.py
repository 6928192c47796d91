"""Bounded retry with exponential backoff for transient failures."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import settings
from src.domain.exceptions import DomainException, OperationTimeoutException

T = TypeVar("T")

logger = structlog.get_logger(__name__)


def is_transient(exc: BaseException) -> bool:
    """Only domain errors flagged retryable are worth another attempt."""
    return isinstance(exc, DomainException) and exc.retryable


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times to try an operation and how long to wait between tries.

    Attributes:
        max_attempts: Total attempts including the first one
        base_delay: Backoff multiplier in seconds (0.1 -> 0.1s, 0.2s, 0.4s...)
        max_delay: Upper bound for a single backoff sleep
        attempt_timeout: Per-attempt deadline, None for no deadline
    """

    max_attempts: int = 3
    base_delay: float = 0.1
    max_delay: float = 2.0
    attempt_timeout: float | None = None

    @classmethod
    def for_store(cls) -> "RetryPolicy":
        """Short, fixed timeouts for local/durable store round trips."""
        return cls(
            max_attempts=settings.store_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
            attempt_timeout=settings.store_timeout,
        )

    @classmethod
    def for_enrichment(cls) -> "RetryPolicy":
        """The enrichment call has its own outer deadline, so no per-attempt one."""
        return cls(
            max_attempts=settings.enrichment_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    operation_name: str,
    retry_if: Callable[[BaseException], bool] = is_transient,
) -> T:
    """
    Run ``operation`` until it succeeds, fails permanently, or attempts run out.

    Non-transient errors and cancellation propagate immediately. After the
    last attempt the original exception is re-raised.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Attempt count, backoff and per-attempt timeout
        operation_name: Used in logs and timeout errors
        retry_if: Predicate deciding whether an exception is retryable

    Returns:
        Whatever the first successful attempt returned
    """

    async def attempt() -> T:
        if policy.attempt_timeout is None:
            return await operation()
        try:
            return await asyncio.wait_for(operation(), timeout=policy.attempt_timeout)
        except asyncio.TimeoutError:
            raise OperationTimeoutException(operation_name, policy.attempt_timeout) from None

    def log_retry(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "operation_retrying",
            operation=operation_name,
            attempt=state.attempt_number,
            max_attempts=policy.max_attempts,
            error=str(exc),
            error_type=type(exc).__name__,
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(multiplier=policy.base_delay, max=policy.max_delay),
        retry=retry_if_exception(retry_if),
        before_sleep=log_retry,
        reraise=True,
    )
    return await retrying(attempt)
