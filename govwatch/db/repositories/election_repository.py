"""
Repository for election data operations.

Responsibility: Persist and query elections
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import select, func

from .base import RecordRepository
from ..models import ElectionModel


class ElectionRepository(RecordRepository[ElectionModel]):
    """Repository for election persistence"""

    model_class = ElectionModel

    def record_to_columns(self, record: BaseModel) -> Dict[str, Any]:
        columns = super().record_to_columns(record)
        columns["election_date"] = columns.pop("date")
        return columns

    async def in_range(
        self,
        start: date,
        end: date,
        jurisdiction_ids: Optional[Sequence[int]] = None,
        limit: int = 500,
    ) -> List[ElectionModel]:
        """Elections on days in [start, end), earliest first"""
        query = select(ElectionModel).where(
            ElectionModel.election_date >= start,
            ElectionModel.election_date < end,
        )
        if jurisdiction_ids is not None:
            query = query.where(ElectionModel.jurisdiction_id.in_(jurisdiction_ids))
        result = await self.session.execute(query.order_by(ElectionModel.election_date).limit(limit))
        return list(result.scalars().all())

    async def count_upcoming(self, jurisdiction_ids: Sequence[int], start: date, end: date) -> int:
        result = await self.session.execute(
            select(func.count(ElectionModel.id)).where(
                ElectionModel.jurisdiction_id.in_(jurisdiction_ids),
                ElectionModel.election_date >= start,
                ElectionModel.election_date < end,
            )
        )
        return result.scalar_one()
