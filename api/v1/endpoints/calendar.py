"""
Calendar API endpoints.

Provides meetings and elections for a date range as JSON or iCalendar.

Responsibility: Calendar endpoints for API v1
"""

from typing import Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from govwatch.db.session import get_db
from govwatch.services.calendar_service import ALL_KINDS, CalendarService, generate_ics, parse_scope
from govwatch.utils.text import normalize_date
from api.v1.schemas.calendar import CalendarEventResponse, CalendarListResponse

router = APIRouter()


def _parse_bound(name: str, value: Optional[str]) -> datetime:
    if not value:
        raise HTTPException(status_code=400, detail="start and end parameters are required")
    # Bounds without an offset are already UTC; others are converted
    parsed = normalize_date(value, timezone_name="UTC")
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid {name} date: {value}")
    return parsed


@router.get("/calendar", response_model=CalendarListResponse)
async def get_calendar(
    start: Optional[str] = Query(None, description="Range start (ISO 8601)"),
    end: Optional[str] = Query(None, description="Range end, exclusive (ISO 8601)"),
    scope: Optional[str] = Query(None, description="e.g. city:austin-tx,county:travis-county-tx"),
    kinds: str = Query("meetings,elections", description="meetings, elections, or both"),
    format: str = Query("json", description="json or ics"),
    session_id: Optional[str] = Query(None, description="Guest session id (rate limited)"),
    db: AsyncSession = Depends(get_db)
):
    """
    List calendar events starting in [start, end).

    With format=ics the events are returned as a downloadable
    text/calendar document instead of JSON.
    """
    start_at = _parse_bound("start", start)
    end_at = _parse_bound("end", end)
    if end_at <= start_at:
        raise HTTPException(status_code=400, detail="end must be after start")

    requested_kinds = [kind.strip() for kind in kinds.split(",") if kind.strip() in ALL_KINDS]
    events = await CalendarService(db).list_events(start_at, end_at, parse_scope(scope), requested_kinds)

    if format == "ics":
        return Response(
            content=generate_ics(events),
            media_type="text/calendar; charset=utf-8",
            headers={"Content-Disposition": 'attachment; filename="civic-calendar.ics"'}
        )

    return CalendarListResponse(
        events=[CalendarEventResponse.model_validate(event.model_dump(mode="json")) for event in events],
        total=len(events),
        start=start_at,
        end=end_at,
    )
