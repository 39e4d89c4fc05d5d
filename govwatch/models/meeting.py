"""
Meeting domain model.

Represents a scheduled public meeting of a council, board, committee,
commission, or authority.

Responsibility: Single meeting record as produced by adapters and enrichment
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field


class MeetingType(str, Enum):
    """Kind of body holding the meeting"""
    CITY_COUNCIL = "city_council"
    BOARD_OF_SUPERVISORS = "board_of_supervisors"
    COMMITTEE = "committee"
    COMMISSION = "commission"
    AUTHORITY = "authority"


class MeetingStatus(str, Enum):
    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class AgendaStatus(str, Enum):
    AVAILABLE = "available"
    NOT_PUBLISHED = "not_published"
    UNAVAILABLE = "unavailable"


class MinutesStatus(str, Enum):
    APPROVED = "approved"
    DRAFT = "draft"
    NOT_PUBLISHED = "not_published"


class MeetingRecord(BaseModel):
    """
    Normalized meeting record.

    Times are naive UTC datetimes. Classification and status fields are
    filled in by the enrichment pipeline, not by adapters.
    """

    # MARK: - Natural Key
    external_id: str = Field(max_length=255)

    # MARK: - Core Fields
    title: str
    body_name: str
    starts_at: datetime
    ends_at: Optional[datetime] = None
    location: Optional[str] = None
    agenda_url: Optional[str] = None
    minutes_url: Optional[str] = None
    source_detail_url: Optional[str] = None

    # MARK: - Derived
    meeting_type: MeetingType = MeetingType.COMMITTEE
    is_legislative: bool = False
    status: MeetingStatus = MeetingStatus.UPCOMING
    agenda_status: AgendaStatus = AgendaStatus.UNAVAILABLE
    agenda_available_at: Optional[datetime] = None
    minutes_status: MinutesStatus = MinutesStatus.NOT_PUBLISHED
    minutes_available_at: Optional[datetime] = None

    # MARK: - Enrichment
    extracted_text: Optional[str] = None
    ai_summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    def natural_key(self) -> str:
        return self.external_id
