"""
Meeting classification and status derivation.

Responsibility: Derive meeting type, legislative flag, and lifecycle
statuses from body name, start time and document links
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple

from ..models.meeting import AgendaStatus, MeetingRecord, MeetingStatus, MeetingType, MinutesStatus

IN_PROGRESS_WINDOW = timedelta(hours=3)
AGENDA_LEAD_TIME = timedelta(hours=72)
MINUTES_LAG = timedelta(days=14)


def determine_meeting_type(body_name: str) -> Tuple[MeetingType, bool]:
    """
    Classify a meeting body.

    Returns:
        (meeting_type, is_legislative)
    """
    lower_body = (body_name or "").lower()

    if "city council" in lower_body:
        return MeetingType.CITY_COUNCIL, True

    if "board of supervisors" in lower_body or "commissioners court" in lower_body:
        return MeetingType.BOARD_OF_SUPERVISORS, True

    if "authority" in lower_body:
        return MeetingType.AUTHORITY, False

    if "commission" in lower_body:
        return MeetingType.COMMISSION, False

    return MeetingType.COMMITTEE, False


def derive_meeting_status(
    starts_at: datetime,
    agenda_url: Optional[str],
    minutes_url: Optional[str],
    now: Optional[datetime] = None,
) -> dict:
    """
    Derive lifecycle fields for a meeting.

    All datetimes are naive UTC. Availability timestamps are only set
    when the corresponding document link exists.
    """
    now = now or datetime.utcnow()

    if starts_at > now:
        status = MeetingStatus.UPCOMING
    elif now - starts_at <= IN_PROGRESS_WINDOW:
        status = MeetingStatus.IN_PROGRESS
    else:
        status = MeetingStatus.COMPLETED

    if agenda_url:
        agenda_status = AgendaStatus.AVAILABLE
    elif starts_at - now > AGENDA_LEAD_TIME:
        agenda_status = AgendaStatus.NOT_PUBLISHED
    else:
        agenda_status = AgendaStatus.UNAVAILABLE

    return {
        "status": status,
        "agenda_status": agenda_status,
        "agenda_available_at": starts_at - AGENDA_LEAD_TIME if agenda_url else None,
        "minutes_status": MinutesStatus.APPROVED if minutes_url else MinutesStatus.NOT_PUBLISHED,
        "minutes_available_at": starts_at + MINUTES_LAG if minutes_url else None,
    }


def classify_meeting(meeting: MeetingRecord, now: Optional[datetime] = None) -> MeetingRecord:
    """Return a copy of the meeting with type and status fields filled in"""
    meeting_type, is_legislative = determine_meeting_type(meeting.body_name)
    derived = derive_meeting_status(meeting.starts_at, meeting.agenda_url, meeting.minutes_url, now)
    return meeting.model_copy(update={
        "meeting_type": meeting_type,
        "is_legislative": is_legislative,
        **derived,
    })
