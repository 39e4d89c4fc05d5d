"""
Election domain model.

Responsibility: Single election record as produced by election adapters
"""

import datetime
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class ElectionKind(str, Enum):
    GENERAL = "general"
    PRIMARY = "primary"
    RUNOFF = "runoff"
    SPECIAL = "special"


class ElectionRecord(BaseModel):
    """Normalized election record. Natural key: external_id within a source."""

    external_id: str = Field(max_length=255)
    name: str
    kind: ElectionKind = ElectionKind.GENERAL
    date: datetime.date
    registration_deadline: Optional[datetime.date] = None
    info_url: Optional[str] = None
    results: Optional[Dict[str, Any]] = None

    def natural_key(self) -> str:
        return self.external_id
