"""Repository layer for database operations."""

from .base import PersistenceOutcome, PersistenceStatus, RecordRepository
from .legislation_repository import LegislationRepository
from .meeting_repository import MeetingRepository
from .election_repository import ElectionRepository
from .jurisdiction_repository import JurisdictionRepository
from .source_repository import SourceRepository
from .tracked_term_repository import TrackedTermRepository
from .ingest_run_repository import IngestRunRepository

__all__ = [
    "PersistenceOutcome",
    "PersistenceStatus",
    "RecordRepository",
    "LegislationRepository",
    "MeetingRepository",
    "ElectionRepository",
    "JurisdictionRepository",
    "SourceRepository",
    "TrackedTermRepository",
    "IngestRunRepository",
]
