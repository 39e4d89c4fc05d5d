"""
Database package for Local Gov Watch.

Provides ORM models, session management, and repository pattern
for data persistence.
"""

from .models import (
    Base,
    JurisdictionModel,
    SourceModel,
    LegislationModel,
    MeetingModel,
    ElectionModel,
    TrackedTermModel,
    TermMatchModel,
    IngestRunModel,
)
from .session import Database, db, get_db

__all__ = [
    "Base",
    "JurisdictionModel",
    "SourceModel",
    "LegislationModel",
    "MeetingModel",
    "ElectionModel",
    "TrackedTermModel",
    "TermMatchModel",
    "IngestRunModel",
    "Database",
    "db",
    "get_db",
]
