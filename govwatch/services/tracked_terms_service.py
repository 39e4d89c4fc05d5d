"""
Tracked-term matching for newly ingested items.

Responsibility: Match new legislation and meetings against users' keyword
sets, record matches, and send alert emails
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import LegislationModel, MeetingModel
from ..db.repositories.jurisdiction_repository import JurisdictionRepository
from ..db.repositories.tracked_term_repository import TrackedTermRepository
from ..exceptions import NotificationError
from .alert_notifier import AlertNotifier, render_alert_html

logger = logging.getLogger(__name__)

Item = Union[LegislationModel, MeetingModel]


def item_content(item: Item) -> str:
    """Lowercased title + AI summary + body text used for keyword checks."""
    body = item.full_text if isinstance(item, LegislationModel) else item.extracted_text
    return " ".join([item.title or "", item.ai_summary or "", body or ""]).lower()


def match_keywords(content: str, keywords: Sequence[str]) -> List[str]:
    """Keywords contained in already-lowercased content, case-insensitively."""
    return [keyword for keyword in keywords if keyword and keyword.lower() in content]


class TrackedTermsService:
    """Check one item at a time against every active tracked term."""

    def __init__(self, session: AsyncSession, notifier: Optional[AlertNotifier] = None) -> None:
        self.session = session
        self.terms = TrackedTermRepository(session)
        self.jurisdictions = JurisdictionRepository(session)
        self.notifier = notifier or AlertNotifier()

    async def check_item(self, item_type: str, item: Item) -> int:
        """
        Record new matches for an item.

        Returns:
            Number of new matches recorded
        """
        jurisdiction = await self.jurisdictions.get_by_id(item.jurisdiction_id)
        if jurisdiction is None:
            logger.info("No jurisdiction found for %s %s", item_type, item.id)
            return 0

        content = item_content(item)
        new_matches = 0

        for term in await self.terms.active_terms():
            if jurisdiction.slug not in (term.jurisdictions or []):
                continue

            matched = match_keywords(content, term.keywords or [])
            if not matched:
                continue

            if await self.terms.get_match(term.id, item_type, item.id) is not None:
                logger.debug("Match for term %s on %s %s already recorded", term.id, item_type, item.id)
                continue

            match = await self.terms.add_match(term, item_type, item.id, matched)
            new_matches += 1
            logger.info("Tracked term '%s' matched %s %s: %s", term.name, item_type, item.id, ", ".join(matched))

            if term.alert_enabled and self.notifier.enabled:
                html = render_alert_html(
                    term_name=term.name,
                    item_type=item_type,
                    item_id=item.id,
                    title=item.title,
                    jurisdiction_slug=jurisdiction.slug,
                    matched_keywords=matched,
                    ai_summary=item.ai_summary,
                    frontend_url=self.notifier.config.frontend_url,
                )
                try:
                    await self.notifier.send(term.email, f"New Match: {term.name}", html)
                except NotificationError as exc:
                    logger.error("Failed to send alert for term %s: %s", term.id, exc)
                else:
                    match.notified = True
                    await self.session.flush()

        return new_matches
