"""
Repository for tracked terms and their matches.

Responsibility: Query active tracked terms and record term matches
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import TermMatchModel, TrackedTermModel


class TrackedTermRepository:
    """Repository for tracked term persistence"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def active_terms(self) -> List[TrackedTermModel]:
        result = await self.session.execute(
            select(TrackedTermModel).where(TrackedTermModel.active.is_(True))
        )
        return list(result.scalars().all())

    async def create(
        self,
        email: str,
        name: str,
        keywords: List[str],
        jurisdictions: List[str],
        alert_enabled: bool = True,
    ) -> TrackedTermModel:
        term = TrackedTermModel(
            email=email,
            name=name,
            keywords=keywords,
            jurisdictions=jurisdictions,
            alert_enabled=alert_enabled,
        )
        self.session.add(term)
        await self.session.flush()
        return term

    async def get_match(self, term_id: int, item_type: str, item_id: int) -> Optional[TermMatchModel]:
        result = await self.session.execute(
            select(TermMatchModel).where(
                TermMatchModel.tracked_term_id == term_id,
                TermMatchModel.item_type == item_type,
                TermMatchModel.item_id == item_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_match(
        self,
        term: TrackedTermModel,
        item_type: str,
        item_id: int,
        matched_keywords: List[str],
    ) -> TermMatchModel:
        """Insert a match and bump the term's counters"""
        match = TermMatchModel(
            tracked_term_id=term.id,
            item_type=item_type,
            item_id=item_id,
            matched_keywords=matched_keywords,
        )
        self.session.add(match)

        term.match_count = (term.match_count or 0) + 1
        term.last_checked_at = datetime.utcnow()

        await self.session.flush()
        return match

    async def matches_for_term(self, term_id: int) -> List[TermMatchModel]:
        result = await self.session.execute(
            select(TermMatchModel).where(TermMatchModel.tracked_term_id == term_id)
        )
        return list(result.scalars().all())
