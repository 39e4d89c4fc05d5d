"""
Pydantic schemas for ingestion status responses.

Responsibility: Ingest run status schemas
"""

from typing import Any, Dict, Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class IngestRunResponse(BaseModel):
    """One recorded connector run."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    source_id: int
    status: str
    log: Optional[str] = None
    stats_json: Optional[Dict[str, Any]] = None
    started_at: datetime
    finished_at: Optional[datetime] = None


class SourceStatusResponse(BaseModel):
    """Latest run of a source."""

    source_id: int
    source_key: str
    source_name: str
    enabled: bool
    last_status: Optional[str] = None
    last_run_at: Optional[datetime] = None
    latest_run: Optional[IngestRunResponse] = None


class StatusResponse(BaseModel):
    sources: List[SourceStatusResponse]
    total: int
