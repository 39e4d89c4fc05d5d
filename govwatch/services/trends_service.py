"""
Weekly topic trends.

Responsibility: Group the week's new legislation and meetings by topic tag
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..db.repositories.jurisdiction_repository import JurisdictionRepository
from ..db.repositories.legislation_repository import LegislationRepository
from ..db.repositories.meeting_repository import MeetingRepository
from ..parsing.keyword_tags import extract_keyword_tags

logger = logging.getLogger(__name__)


def week_start_for(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


@dataclass
class TopicTrend:
    tag: str
    item_count: int = 0
    item_ids: List[str] = field(default_factory=list)
    jurisdictions: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "tag": self.tag,
            "item_count": self.item_count,
            "item_ids": self.item_ids,
            "jurisdictions": self.jurisdictions,
        }


def _item_tags(tags: Optional[List[str]], title: str, summary: Optional[str]) -> List[str]:
    if tags:
        return list(dict.fromkeys(tags))
    return extract_keyword_tags(" ".join(filter(None, [title, summary])))


class TrendsService:
    """Computes topic trends on demand from stored items."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.legislation = LegislationRepository(session)
        self.meetings = MeetingRepository(session)
        self.jurisdictions = JurisdictionRepository(session)

    async def weekly_trends(
        self,
        jurisdiction_ids: Sequence[int],
        week_start: date,
    ) -> List[TopicTrend]:
        """
        Trends for items created in [week_start, week_start + 7 days).

        Item ids are prefixed with their kind ("legislation:12"), and
        trends are sorted by item count, highest first.
        """
        if not jurisdiction_ids:
            return []

        start = datetime.combine(week_start, time.min)
        end = start + timedelta(days=7)
        slug_by_id = await self.jurisdictions.slug_map(jurisdiction_ids)
        trends: Dict[str, TopicTrend] = {}

        def add(tag: str, item_key: str, jurisdiction_id: int) -> None:
            trend = trends.setdefault(tag, TopicTrend(tag=tag))
            trend.item_count += 1
            trend.item_ids.append(item_key)
            slug = slug_by_id.get(jurisdiction_id)
            if slug and slug not in trend.jurisdictions:
                trend.jurisdictions.append(slug)

        for item in await self.legislation.created_between(jurisdiction_ids, start, end):
            for tag in _item_tags(item.tags, item.title, item.ai_summary or item.summary):
                add(tag, f"legislation:{item.id}", item.jurisdiction_id)

        for item in await self.meetings.created_between(jurisdiction_ids, start, end):
            for tag in _item_tags(item.tags, item.title, item.ai_summary):
                add(tag, f"meeting:{item.id}", item.jurisdiction_id)

        ordered = sorted(trends.values(), key=lambda trend: (-trend.item_count, trend.tag))
        logger.info("Computed %d topic trends for week of %s", len(ordered), week_start.isoformat())
        return ordered
