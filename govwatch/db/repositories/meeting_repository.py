"""
Repository for meeting data operations.

Responsibility: Persist and query public meetings
"""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select, desc, func

from .base import RecordRepository
from ..models import MeetingModel


class MeetingRepository(RecordRepository[MeetingModel]):
    """Repository for meeting persistence and calendar/minutes queries"""

    model_class = MeetingModel

    async def in_range(
        self,
        start: datetime,
        end: datetime,
        jurisdiction_ids: Optional[Sequence[int]] = None,
        limit: int = 500,
    ) -> List[MeetingModel]:
        """Meetings starting in [start, end), earliest first"""
        query = select(MeetingModel).where(
            MeetingModel.starts_at >= start,
            MeetingModel.starts_at < end,
        )
        if jurisdiction_ids is not None:
            query = query.where(MeetingModel.jurisdiction_id.in_(jurisdiction_ids))
        result = await self.session.execute(query.order_by(MeetingModel.starts_at).limit(limit))
        return list(result.scalars().all())

    async def missing_minutes(
        self,
        started_after: datetime,
        started_before: datetime,
        limit: int = 50,
    ) -> List[MeetingModel]:
        """Completed meetings with a detail page but no minutes link yet"""
        result = await self.session.execute(
            select(MeetingModel)
            .where(
                MeetingModel.minutes_url.is_(None),
                MeetingModel.source_detail_url.is_not(None),
                MeetingModel.status == "completed",
                MeetingModel.starts_at >= started_after,
                MeetingModel.starts_at <= started_before,
            )
            .order_by(desc(MeetingModel.starts_at))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def created_between(
        self,
        jurisdiction_ids: Sequence[int],
        start: datetime,
        end: datetime,
    ) -> List[MeetingModel]:
        result = await self.session.execute(
            select(MeetingModel).where(
                MeetingModel.jurisdiction_id.in_(jurisdiction_ids),
                MeetingModel.created_at >= start,
                MeetingModel.created_at < end,
            )
        )
        return list(result.scalars().all())

    async def count_upcoming(self, jurisdiction_ids: Sequence[int], start: datetime, end: datetime) -> int:
        result = await self.session.execute(
            select(func.count(MeetingModel.id)).where(
                MeetingModel.jurisdiction_id.in_(jurisdiction_ids),
                MeetingModel.starts_at >= start,
                MeetingModel.starts_at < end,
            )
        )
        return result.scalar_one()
