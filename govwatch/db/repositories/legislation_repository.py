"""
Repository for legislation data operations.

Responsibility: Persist and query ordinances, resolutions, and bills
"""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select, desc, func

from .base import RecordRepository
from ..models import LegislationModel


class LegislationRepository(RecordRepository[LegislationModel]):
    """
    Repository for legislation persistence.

    Example:
        repo = LegislationRepository(session)
        outcome = await repo.upsert(record, source_id=1, jurisdiction_id=1)
    """

    model_class = LegislationModel

    async def created_between(
        self,
        jurisdiction_ids: Sequence[int],
        start: datetime,
        end: datetime,
    ) -> List[LegislationModel]:
        result = await self.session.execute(
            select(LegislationModel)
            .where(
                LegislationModel.jurisdiction_id.in_(jurisdiction_ids),
                LegislationModel.created_at >= start,
                LegislationModel.created_at < end,
            )
            .order_by(desc(LegislationModel.created_at))
        )
        return list(result.scalars().all())

    async def count_created_since(self, jurisdiction_ids: Sequence[int], since: datetime) -> int:
        result = await self.session.execute(
            select(func.count(LegislationModel.id)).where(
                LegislationModel.jurisdiction_id.in_(jurisdiction_ids),
                LegislationModel.created_at >= since,
            )
        )
        return result.scalar_one()

    async def count_status_changes_since(self, jurisdiction_ids: Sequence[int], since: datetime) -> int:
        """Rows updated since `since` that already existed before it"""
        result = await self.session.execute(
            select(func.count(LegislationModel.id)).where(
                LegislationModel.jurisdiction_id.in_(jurisdiction_ids),
                LegislationModel.updated_at >= since,
                LegislationModel.created_at < since,
            )
        )
        return result.scalar_one()

    async def recent(
        self,
        jurisdiction_ids: Sequence[int],
        limit: int = 5,
        since: Optional[datetime] = None,
    ) -> List[LegislationModel]:
        query = select(LegislationModel).where(LegislationModel.jurisdiction_id.in_(jurisdiction_ids))
        if since is not None:
            query = query.where(LegislationModel.created_at >= since)
        result = await self.session.execute(
            query.order_by(desc(LegislationModel.created_at)).limit(limit)
        )
        return list(result.scalars().all())
