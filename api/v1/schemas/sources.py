"""
Pydantic schemas for source (connector) API requests and responses.

Responsibility: Source listing and run schemas
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class SourceResponse(BaseModel):
    """Configured source."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    key: str
    name: str
    kind: str
    url: Optional[str] = None
    parser_key: str
    jurisdiction_id: int
    schedule: Optional[str] = None
    enabled: bool
    last_run_at: Optional[datetime] = None
    last_status: Optional[str] = None


class SourceListResponse(BaseModel):
    sources: List[SourceResponse]
    total: int


class IngestStatsResponse(BaseModel):
    found: int = 0
    new: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    errors: int = 0
    pdfs_processed: int = 0
    ai_tokens_used: int = 0
    error_messages: List[str] = Field(default_factory=list)
    fixture_used: bool = False
    failed: bool = False


class RunResultResponse(BaseModel):
    """Outcome of one source run."""

    source_id: int
    source_key: str
    run_id: Optional[int] = None
    status: str
    log: str
    stats: IngestStatsResponse


class ScopeRunRequest(BaseModel):
    """Body for running every enabled source in a jurisdiction scope."""

    scope: List[str] = Field(
        ...,
        min_length=1,
        description='Scopes such as "city:austin-tx" or "county:travis-county-tx"'
    )


class ScopeRunResponse(BaseModel):
    results: List[RunResultResponse]
    total: int
