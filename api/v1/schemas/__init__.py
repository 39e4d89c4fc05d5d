"""API v1 response schemas."""

from api.v1.schemas.calendar import (
    CalendarEventResponse,
    CalendarListResponse
)
from api.v1.schemas.sources import (
    SourceResponse,
    SourceListResponse,
    IngestStatsResponse,
    RunResultResponse,
    ScopeRunRequest,
    ScopeRunResponse
)
from api.v1.schemas.status import (
    IngestRunResponse,
    SourceStatusResponse,
    StatusResponse
)

__all__ = [
    "CalendarEventResponse",
    "CalendarListResponse",
    "SourceResponse",
    "SourceListResponse",
    "IngestStatsResponse",
    "RunResultResponse",
    "ScopeRunRequest",
    "ScopeRunResponse",
    "IngestRunResponse",
    "SourceStatusResponse",
    "StatusResponse",
]
