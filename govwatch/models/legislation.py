"""
Legislation domain model.

Represents an ordinance, resolution, or bill scraped from a municipal,
county, or state website.

Responsibility: Single legislation record as produced by adapters and enrichment
"""

from datetime import date
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field


class LegislationStatus(str, Enum):
    """Lifecycle status of a legislative item"""
    INTRODUCED = "introduced"
    PENDING = "pending"
    IN_COMMITTEE = "in_committee"
    PASSED = "passed"
    EFFECTIVE = "effective"
    WITHDRAWN = "withdrawn"
    FAILED = "failed"


class LegislationRecord(BaseModel):
    """
    Normalized legislation record.

    Natural key: external_id within a source (or within a jurisdiction for
    sources that key per jurisdiction, see BaseAdapter.natural_key_scope).
    Example: "ORD-2025-001"
    """

    # MARK: - Natural Key
    external_id: str = Field(description="Stable identifier across runs", max_length=255)

    # MARK: - Core Fields
    title: str = Field(description="Full title of the item")
    status: LegislationStatus = Field(default=LegislationStatus.INTRODUCED)
    summary: Optional[str] = Field(default=None, description="Source-provided summary")
    introduced_at: Optional[date] = None
    passed_at: Optional[date] = None
    effective_at: Optional[date] = None
    doc_url: Optional[str] = None
    pdf_url: Optional[str] = None

    # MARK: - Sponsorship
    author: Optional[str] = None
    author_role: Optional[str] = None
    coauthors: List[str] = Field(default_factory=list)
    district: Optional[str] = None
    district_number: Optional[int] = None

    # MARK: - Enrichment
    full_text: Optional[str] = Field(default=None, description="Extracted document text")
    ai_summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    def natural_key(self) -> str:
        """Return the deduplication key for this record"""
        return self.external_id
