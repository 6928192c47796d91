"""Translate driver-level failures into domain exceptions."""

from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.exceptions import StoreUnavailableException


@asynccontextmanager
async def store_errors(
    operation: str,
    session: AsyncSession | None = None,
) -> AsyncGenerator[None, None]:
    """
    Re-raise connection-level database errors as StoreUnavailableException.

    When ``session`` is given it is rolled back first so a retry starts
    from a clean transaction. Integrity and programming errors pass
    through unchanged.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        await _reset(session)
        raise StoreUnavailableException(operation, str(e.orig or e)) from e
    except DBAPIError as e:
        if not e.connection_invalidated:
            raise
        await _reset(session)
        raise StoreUnavailableException(operation, str(e.orig or e)) from e


async def _reset(session: AsyncSession | None) -> None:
    if session is None:
        return
    # The connection is already gone; a failing rollback adds nothing
    with suppress(DBAPIError):
        await session.rollback()


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo, so naive timestamps are read back as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
