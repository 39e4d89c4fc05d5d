"""
Calendar event model shared by the calendar service and the API.

Responsibility: Flattened view of meetings and elections for calendar export
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class CalendarEventKind(str, Enum):
    MEETING = "meeting"
    ELECTION = "election"


class CalendarEvent(BaseModel):
    id: int
    kind: CalendarEventKind
    title: str
    starts_at: datetime
    ends_at: Optional[datetime] = None
    all_day: bool = False
    location: Optional[str] = None
    body_name: Optional[str] = None
    jurisdiction_slug: Optional[str] = None
    url: Optional[str] = None
