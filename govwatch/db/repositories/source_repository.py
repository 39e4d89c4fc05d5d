"""
Repository for sources (connectors).

Responsibility: Load connector configuration and record run outcomes
"""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import JurisdictionModel, SourceModel


class SourceRepository:
    """Repository for source lookups and last-run bookkeeping"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, source_id: int) -> Optional[SourceModel]:
        return await self.session.get(SourceModel, source_id)

    async def get_by_key(self, key: str) -> Optional[SourceModel]:
        result = await self.session.execute(select(SourceModel).where(SourceModel.key == key))
        return result.scalar_one_or_none()

    async def list_all(self, enabled_only: bool = False) -> List[SourceModel]:
        query = select(SourceModel).order_by(SourceModel.id)
        if enabled_only:
            query = query.where(SourceModel.enabled.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def enabled_for_jurisdictions(self, slugs: Sequence[str]) -> List[SourceModel]:
        result = await self.session.execute(
            select(SourceModel)
            .join(JurisdictionModel, SourceModel.jurisdiction_id == JurisdictionModel.id)
            .where(
                SourceModel.enabled.is_(True),
                JurisdictionModel.slug.in_(list(slugs)),
            )
            .order_by(SourceModel.id)
        )
        return list(result.scalars().all())

    async def mark_run(self, source_id: int, status: str, finished_at: Optional[datetime] = None) -> None:
        source = await self.get_by_id(source_id)
        if source is None:
            return
        source.last_run_at = finished_at or datetime.utcnow()
        source.last_status = status
        await self.session.flush()

    async def get_or_create(self, key: str, **fields) -> SourceModel:
        existing = await self.get_by_key(key)
        if existing:
            return existing
        source = SourceModel(key=key, **fields)
        self.session.add(source)
        await self.session.flush()
        return source
