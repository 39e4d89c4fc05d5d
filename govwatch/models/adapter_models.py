"""
Adapter response models.

Defines unified response structures for all source adapters.
These models ensure consistent error handling, metrics tracking,
and data normalization across different municipal websites.

Responsibility: Data transfer objects for adapter operations
"""

from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar, Optional, List, Dict, Any

from pydantic import BaseModel, Field


class AdapterStatus(str, Enum):
    """
    Status of an adapter operation.

    Used to quickly determine if retry logic or error handling is needed.
    """
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"  # Some rows failed, some succeeded
    DEGRADED = "degraded"  # Nothing scraped, sample records substituted
    FAILURE = "failure"
    SOURCE_UNAVAILABLE = "source_unavailable"


class AdapterError(BaseModel):
    """
    Structured error information from adapter operations.

    Captures context needed for debugging and the per-run error log.
    """
    timestamp: datetime = Field(description="When the error occurred (UTC)")
    error_type: str = Field(description="Exception class name or error category")
    message: str = Field(description="Human-readable error message")
    context: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context (URL, row index, etc.)"
    )
    retryable: bool = Field(
        default=False,
        description="Whether a later run may succeed"
    )


class AdapterMetrics(BaseModel):
    """Operational metrics for adapter execution."""
    records_attempted: int = Field(ge=0)
    records_succeeded: int = Field(ge=0)
    records_failed: int = Field(ge=0)
    records_skipped: int = Field(ge=0, default=0)
    duration_seconds: float = Field(ge=0.0)
    requests_made: int = Field(ge=0, default=0)


T = TypeVar('T')


class AdapterResponse(BaseModel, Generic[T]):
    """
    Unified response wrapper for all adapter operations.

    Generic type T represents the normalized record model (LegislationRecord,
    MeetingRecord, ElectionRecord).

    Responsibility: Standard response container with status, data, errors, metrics
    """
    status: AdapterStatus = Field(description="Operation status")
    data: Optional[List[T]] = Field(
        default=None,
        description="List of successfully normalized records"
    )
    errors: List[AdapterError] = Field(
        default_factory=list,
        description="List of errors encountered during operation"
    )
    metrics: AdapterMetrics = Field(description="Operation performance metrics")
    source: str = Field(description="Adapter/source identifier")
    fetch_timestamp: datetime = Field(description="When data was fetched (UTC)")
    used_fixture: bool = Field(
        default=False,
        description="Whether sample records replaced an empty scrape"
    )
