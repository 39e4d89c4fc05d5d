"""
Calendar export for meetings and elections.

Responsibility: Build calendar events for a date range and serialize them
as iCalendar text
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..db.repositories.election_repository import ElectionRepository
from ..db.repositories.jurisdiction_repository import JurisdictionRepository
from ..db.repositories.meeting_repository import MeetingRepository
from ..models.calendar import CalendarEvent, CalendarEventKind

logger = logging.getLogger(__name__)

DEFAULT_MEETING_DURATION = timedelta(hours=2)
DEFAULT_JURISDICTIONS = ("austin-tx",)
ALL_KINDS = ("meetings", "elections")
MAX_ROWS_PER_KIND = 500
PRODID = "-//Local Gov Watch//Civic Calendar//EN"
UID_DOMAIN = "localgov-watch"


def parse_scope(scope: Optional[str]) -> List[str]:
    """Turn "city:austin-tx,county:travis-county-tx" into bare slugs."""
    slugs = []
    for part in (scope or "").split(","):
        part = part.strip()
        if not part:
            continue
        slug = part.split(":", 1)[1] if ":" in part else part
        if slug:
            slugs.append(slug)
    return slugs


def escape_ics_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def _format_utc(value: datetime) -> str:
    return value.strftime("%Y%m%dT%H%M%SZ")


def _format_day(value: date) -> str:
    return value.strftime("%Y%m%d")


def generate_ics(events: Iterable[CalendarEvent], now: Optional[datetime] = None) -> str:
    """
    Serialize events as an iCalendar document.

    Datetimes are naive UTC. All-day events use VALUE=DATE with an
    exclusive DTEND on the following day; timed events without an end
    last two hours.
    """
    stamp = _format_utc(now or datetime.utcnow())
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]

    for event in events:
        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{event.kind.value}-{event.id}@{UID_DOMAIN}")
        lines.append(f"DTSTAMP:{stamp}")

        if event.all_day:
            start_day = event.starts_at.date()
            lines.append(f"DTSTART;VALUE=DATE:{_format_day(start_day)}")
            lines.append(f"DTEND;VALUE=DATE:{_format_day(start_day + timedelta(days=1))}")
        else:
            ends_at = event.ends_at or event.starts_at + DEFAULT_MEETING_DURATION
            lines.append(f"DTSTART:{_format_utc(event.starts_at)}")
            lines.append(f"DTEND:{_format_utc(ends_at)}")

        lines.append(f"SUMMARY:{escape_ics_text(event.title)}")
        if event.location:
            lines.append(f"LOCATION:{escape_ics_text(event.location)}")
        if event.body_name:
            lines.append(f"DESCRIPTION:{escape_ics_text(event.body_name)}")
        lines.append("END:VEVENT")

    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


class CalendarService:
    """Reads meetings and elections into calendar events."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.meetings = MeetingRepository(session)
        self.elections = ElectionRepository(session)
        self.jurisdictions = JurisdictionRepository(session)

    async def list_events(
        self,
        start: datetime,
        end: datetime,
        jurisdiction_slugs: Optional[Sequence[str]] = None,
        kinds: Sequence[str] = ALL_KINDS,
    ) -> List[CalendarEvent]:
        """
        Events starting in [start, end), sorted by start.

        Meetings without an end time end two hours after they start;
        elections are all-day events on their date.
        """
        slugs = list(jurisdiction_slugs or DEFAULT_JURISDICTIONS)
        jurisdictions = await self.jurisdictions.get_by_slugs(slugs)
        if not jurisdictions:
            return []

        slug_by_id = {jurisdiction.id: jurisdiction.slug for jurisdiction in jurisdictions}
        jurisdiction_ids = list(slug_by_id)
        events: List[CalendarEvent] = []

        if "meetings" in kinds:
            for meeting in await self.meetings.in_range(start, end, jurisdiction_ids, limit=MAX_ROWS_PER_KIND):
                events.append(CalendarEvent(
                    id=meeting.id,
                    kind=CalendarEventKind.MEETING,
                    title=meeting.title or "Untitled Meeting",
                    starts_at=meeting.starts_at,
                    ends_at=meeting.ends_at or meeting.starts_at + DEFAULT_MEETING_DURATION,
                    all_day=False,
                    location=meeting.location,
                    body_name=meeting.body_name,
                    jurisdiction_slug=slug_by_id.get(meeting.jurisdiction_id),
                    url=f"/meetings/{meeting.id}",
                ))

        if "elections" in kinds:
            # Election days start at midnight and are in range while that midnight is before end
            end_day = end.date() if end.time() == time.min else end.date() + timedelta(days=1)
            for election in await self.elections.in_range(
                start.date(), end_day, jurisdiction_ids, limit=MAX_ROWS_PER_KIND
            ):
                events.append(CalendarEvent(
                    id=election.id,
                    kind=CalendarEventKind.ELECTION,
                    title=election.name,
                    starts_at=datetime.combine(election.election_date, time.min),
                    all_day=True,
                    jurisdiction_slug=slug_by_id.get(election.jurisdiction_id),
                    url=f"/elections/{election.id}",
                ))

        events.sort(key=lambda event: event.starts_at)
        logger.info("Built %d calendar events for %s", len(events), ", ".join(slugs))
        return events
