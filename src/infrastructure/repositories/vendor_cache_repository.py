"""PostgreSQL implementation of VendorCacheRepository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.entities import AnalysisFields, VendorAnalysis
from src.domain.interfaces import VendorCacheRepository
from src.infrastructure.database.models import VendorAnalysisModel

from .errors import as_utc, store_errors


class PostgresVendorCacheRepository(VendorCacheRepository):
    """
    PostgreSQL implementation of the vendor cache.

    Each call runs in its own short session, so lookups for different
    vendors can run concurrently and cache writes commit independently
    of the caller's request transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, vendor_key: str) -> Optional[VendorAnalysis]:
        """Retrieve a cache entry by vendor key."""
        async with store_errors("vendor_cache_get"):
            async with self._session_factory() as session:
                stmt = select(VendorAnalysisModel).where(
                    VendorAnalysisModel.vendor_key == vendor_key
                )
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def upsert(self, entry: VendorAnalysis) -> VendorAnalysis:
        """Insert or replace the whole entry for its vendor key."""
        analysis = entry.analysis
        model = VendorAnalysisModel(
            vendor_key=entry.vendor_key,
            original_name=entry.original_name,
            analysis_source=entry.analysis_source,
            unethical_practices=list(analysis.unethical_practices),
            ethical_practices=list(analysis.ethical_practices),
            practice_weights=dict(analysis.practice_weights),
            practice_categories=dict(analysis.practice_categories),
            practice_search_terms=dict(analysis.practice_search_terms),
            information=dict(analysis.information),
            citations=dict(analysis.citations),
            analyzed_at=entry.analyzed_at,
        )

        async with store_errors("vendor_cache_upsert"):
            async with self._session_factory() as session:
                await session.merge(model)
                await session.commit()

        return entry

    def _to_entity(self, model: VendorAnalysisModel) -> VendorAnalysis:
        """Convert database model to domain entity."""
        return VendorAnalysis(
            vendor_key=model.vendor_key,
            original_name=model.original_name,
            analysis_source=model.analysis_source,
            analysis=AnalysisFields(
                unethical_practices=list(model.unethical_practices or []),
                ethical_practices=list(model.ethical_practices or []),
                practice_weights=dict(model.practice_weights or {}),
                practice_categories=dict(model.practice_categories or {}),
                practice_search_terms=dict(model.practice_search_terms or {}),
                information=dict(model.information or {}),
                citations=dict(model.citations or {}),
            ),
            analyzed_at=as_utc(model.analyzed_at),
        )
