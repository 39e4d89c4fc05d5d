"""
Minutes discovery for completed meetings.

Revisits the detail pages of recent meetings that have no minutes yet and
records the minutes link once one is posted.

Responsibility: Backfill minutes_url / minutes_status on past meetings
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from bs4 import Tag

from ..db.repositories.meeting_repository import MeetingRepository
from ..db.session import Database, db
from ..exceptions import GovWatchError
from ..models.meeting import MinutesStatus
from ..utils.html import load_html
from ..utils.http_client import PoliteFetcher
from ..utils.text import absolute_url, safe_text

logger = logging.getLogger(__name__)

MINUTES_SELECTORS = [
    'a:-soup-contains("Minutes")',
    'a:-soup-contains("Draft Minutes")',
    'a:-soup-contains("Approved Minutes")',
    'a:-soup-contains("Meeting Minutes")',
    'a[href*="View.ashx?M=M"]',
    'a[href*="Minutes.pdf"]',
    'a[href*="minutes.pdf"]',
    'a[href*="/gateway.aspx"][href*=".pdf"]',
]

MIN_AGE = timedelta(days=3)
MAX_AGE = timedelta(days=60)
MAX_MEETINGS_PER_RUN = 50


def find_minutes_link(html: str, page_url: str) -> Optional[Tuple[str, MinutesStatus]]:
    """
    Locate a minutes link on a meeting detail page.

    Returns:
        (absolute_url, status) or None; status is draft when the link text
        says so
    """
    soup = load_html(html)
    for selector in MINUTES_SELECTORS:
        link: Optional[Tag] = soup.select_one(selector)
        if link is None:
            continue
        href = link.get("href")
        if not href or "minute" not in href.lower():
            continue

        url = absolute_url(page_url, href)
        if not url:
            continue
        status = MinutesStatus.DRAFT if "draft" in safe_text(link.get_text()).lower() else MinutesStatus.APPROVED
        return url, status
    return None


@dataclass
class MinutesDiscoveryResult:
    checked: int = 0
    found: int = 0
    updates: List[dict] = field(default_factory=list)


class MinutesDiscoveryService:
    """Check recent meetings without minutes for newly posted minutes."""

    def __init__(
        self,
        database: Optional[Database] = None,
        fetcher: Optional[PoliteFetcher] = None,
        now: Optional[datetime] = None,
    ) -> None:
        self.database = database or db
        self.fetcher = fetcher or PoliteFetcher()
        self._now = now

    @property
    def now(self) -> datetime:
        return self._now or datetime.utcnow()

    async def discover(self) -> MinutesDiscoveryResult:
        now = self.now
        async with self.database.session() as session:
            meetings = await MeetingRepository(session).missing_minutes(
                started_after=now - MAX_AGE,
                started_before=now - MIN_AGE,
                limit=MAX_MEETINGS_PER_RUN,
            )
            candidates = [(meeting.id, meeting.title, meeting.source_detail_url) for meeting in meetings]

        logger.info("Found %d meetings to check for minutes", len(candidates))
        result = MinutesDiscoveryResult(checked=len(candidates))

        for meeting_id, title, detail_url in candidates:
            try:
                html = await self.fetcher.get_text(detail_url)
            except GovWatchError as exc:
                logger.warning("Failed to fetch detail page for meeting %s: %s", meeting_id, exc)
                continue

            found = find_minutes_link(html, detail_url)
            if found is None:
                logger.debug("No minutes yet for: %s", title)
                continue

            minutes_url, status = found
            async with self.database.session() as session:
                meeting = await MeetingRepository(session).get_by_id(meeting_id)
                if meeting is None:
                    continue
                meeting.minutes_url = minutes_url
                meeting.minutes_status = status.value
                meeting.minutes_available_at = now
                meeting.updated_at = now

            result.found += 1
            result.updates.append({"id": meeting_id, "title": title, "url": minutes_url})
            logger.info("Found minutes for: %s", title)

        logger.info("Minutes discovery complete: checked %d, found %d", result.checked, result.found)
        return result
