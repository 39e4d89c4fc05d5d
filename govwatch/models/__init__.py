"""Domain models shared by adapters, pipeline, and services."""

from .adapter_models import (
    AdapterStatus,
    AdapterError,
    AdapterMetrics,
    AdapterResponse,
)
from .legislation import LegislationRecord, LegislationStatus
from .meeting import (
    MeetingRecord,
    MeetingType,
    MeetingStatus,
    AgendaStatus,
    MinutesStatus,
)
from .election import ElectionRecord, ElectionKind
from .ingest_stats import IngestStats, RunStatus, MAX_RECORDED_ERRORS
from .calendar import CalendarEvent, CalendarEventKind

__all__ = [
    "AdapterStatus",
    "AdapterError",
    "AdapterMetrics",
    "AdapterResponse",
    "LegislationRecord",
    "LegislationStatus",
    "MeetingRecord",
    "MeetingType",
    "MeetingStatus",
    "AgendaStatus",
    "MinutesStatus",
    "ElectionRecord",
    "ElectionKind",
    "IngestStats",
    "RunStatus",
    "MAX_RECORDED_ERRORS",
    "CalendarEvent",
    "CalendarEventKind",
]
