"""
Pydantic schemas for calendar API responses.

Responsibility: Calendar event response schemas
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class CalendarEventResponse(BaseModel):
    """A meeting or election on the calendar."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    kind: str
    title: str
    starts_at: datetime
    ends_at: Optional[datetime] = None
    all_day: bool = False
    location: Optional[str] = None
    body_name: Optional[str] = None
    jurisdiction_slug: Optional[str] = None
    url: Optional[str] = None


class CalendarListResponse(BaseModel):
    """Events in a date range."""

    events: List[CalendarEventResponse]
    total: int
    start: datetime
    end: datetime
