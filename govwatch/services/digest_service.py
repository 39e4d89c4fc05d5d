"""
Weekly digest assembly and rendering.

Builds the per-jurisdiction snapshot (new legislation, status changes,
upcoming meetings and elections), the week's top topic trends and a few
notable items, then renders the email body.

Responsibility: Produce digest data and its HTML email
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from html import escape
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..db.repositories.election_repository import ElectionRepository
from ..db.repositories.jurisdiction_repository import JurisdictionRepository
from ..db.repositories.legislation_repository import LegislationRepository
from ..db.repositories.meeting_repository import MeetingRepository
from ..exceptions import GovWatchError
from .trends_service import TopicTrend, TrendsService, week_start_for

logger = logging.getLogger(__name__)

DIGEST_SCOPES = ("city", "county", "both")
TOP_TRENDS = 5
NOTABLE_ITEMS = 5


@dataclass
class DigestSnapshot:
    new_legislation: int = 0
    status_changes: int = 0
    upcoming_meetings: int = 0
    upcoming_elections: int = 0


@dataclass
class NotableItem:
    type: str
    title: str
    date: str
    url: str


@dataclass
class Digest:
    jurisdiction_slug: str
    jurisdiction_name: str
    scope: str
    snapshot: DigestSnapshot
    trends: List[TopicTrend] = field(default_factory=list)
    notable_items: List[NotableItem] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.utcnow)


class DigestService:
    """Gathers digest data for one jurisdiction."""

    def __init__(self, session: AsyncSession, now: Optional[datetime] = None) -> None:
        self.session = session
        self._now = now
        self.jurisdictions = JurisdictionRepository(session)
        self.legislation = LegislationRepository(session)
        self.meetings = MeetingRepository(session)
        self.elections = ElectionRepository(session)
        self.trends = TrendsService(session)

    @property
    def now(self) -> datetime:
        return self._now or datetime.utcnow()

    async def scope_jurisdiction_ids(self, jurisdiction_slug: str, scope: str) -> List[int]:
        """
        Jurisdictions covered by a digest.

        "city" is the jurisdiction alone; "county" and "both" cover the
        county (the jurisdiction itself or its parent) and all its cities.
        """
        if scope not in DIGEST_SCOPES:
            raise ValueError(f"Unknown digest scope: {scope}")

        jurisdiction = await self.jurisdictions.get_by_slug(jurisdiction_slug)
        if jurisdiction is None:
            raise GovWatchError(f"Jurisdiction not found: {jurisdiction_slug}")

        ids = [jurisdiction.id]
        if scope in ("county", "both"):
            county_id = jurisdiction.id if jurisdiction.type == "county" else jurisdiction.parent_id
            if county_id is not None:
                cities = await self.jurisdictions.children_of(county_id)
                ids = [county_id, *(city.id for city in cities)]
                if jurisdiction.id not in ids:
                    ids.append(jurisdiction.id)
        return ids

    async def build(
        self,
        jurisdiction_slug: str,
        scope: str = "city",
        topics: Optional[Sequence[str]] = None,
    ) -> Digest:
        now = self.now
        jurisdiction_ids = await self.scope_jurisdiction_ids(jurisdiction_slug, scope)
        jurisdiction = await self.jurisdictions.get_by_slug(jurisdiction_slug)
        week_ago = now - timedelta(days=7)
        today = now.date()

        snapshot = DigestSnapshot(
            new_legislation=await self.legislation.count_created_since(jurisdiction_ids, week_ago),
            status_changes=await self.legislation.count_status_changes_since(jurisdiction_ids, week_ago),
            upcoming_meetings=await self.meetings.count_upcoming(
                jurisdiction_ids, now, now + timedelta(days=14)
            ),
            upcoming_elections=await self.elections.count_upcoming(
                jurisdiction_ids, today, today + timedelta(days=90)
            ),
        )

        trends = await self.trends.weekly_trends(jurisdiction_ids, week_start_for(today))
        if topics:
            trends = [trend for trend in trends if trend.tag in topics]

        notable = [
            NotableItem(
                type="legislation",
                title=item.title,
                date=(item.introduced_at or item.created_at.date()).isoformat(),
                url=f"/legislation/{item.id}",
            )
            for item in await self.legislation.recent(jurisdiction_ids, limit=NOTABLE_ITEMS, since=week_ago)
        ]

        logger.info(
            "Built %s digest for %s: %d new, %d changes, %d meetings, %d elections",
            scope, jurisdiction_slug, snapshot.new_legislation, snapshot.status_changes,
            snapshot.upcoming_meetings, snapshot.upcoming_elections,
        )
        return Digest(
            jurisdiction_slug=jurisdiction_slug,
            jurisdiction_name=jurisdiction.name,
            scope=scope,
            snapshot=snapshot,
            trends=trends[:TOP_TRENDS],
            notable_items=notable,
            generated_at=now,
        )


def render_digest_html(digest: Digest, frontend_url: str) -> str:
    base_url = frontend_url.rstrip("/")
    snapshot = digest.snapshot

    trend_rows = "".join(
        f'<li style="margin: 4px 0;"><strong>{escape(trend.tag)}</strong>: '
        f'{trend.item_count} item{"s" if trend.item_count != 1 else ""}</li>'
        for trend in digest.trends
    ) or '<li style="color: #6b7280;">No trending topics this week</li>'

    item_rows = "".join(
        f'<li style="margin: 6px 0;"><a href="{escape(base_url + item.url)}" style="color: #2563eb;">'
        f'{escape(item.title)}</a> <span style="color: #6b7280;">({escape(item.date)})</span></li>'
        for item in digest.notable_items
    ) or '<li style="color: #6b7280;">No new legislation this week</li>'

    return f"""
    <div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #1f2937;">Your Weekly Civic Digest: {escape(digest.jurisdiction_name)}</h2>
      <table style="width: 100%; border-collapse: collapse; margin: 16px 0;">
        <tr>
          <td style="padding: 8px;"><strong>{snapshot.new_legislation}</strong> new legislation</td>
          <td style="padding: 8px;"><strong>{snapshot.status_changes}</strong> status changes</td>
        </tr>
        <tr>
          <td style="padding: 8px;"><strong>{snapshot.upcoming_meetings}</strong> meetings in the next 2 weeks</td>
          <td style="padding: 8px;"><strong>{snapshot.upcoming_elections}</strong> upcoming elections</td>
        </tr>
      </table>
      <h3 style="color: #111827;">Trending Topics</h3>
      <ul>{trend_rows}</ul>
      <h3 style="color: #111827;">Notable Legislation</h3>
      <ul>{item_rows}</ul>
      <hr style="margin: 32px 0; border: none; border-top: 1px solid #e5e7eb;">
      <p style="color: #6b7280; font-size: 14px; text-align: center;">
        <a href="{escape(base_url)}/settings" style="color: #2563eb; text-decoration: none;">Manage digest preferences</a>
      </p>
    </div>
    """
