"""
SQLAlchemy database models for Local Gov Watch.

ORM models that map to database tables with proper indexing,
constraints, and relationships.

Responsibility: Define database schema and ORM mappings
"""

from datetime import date, datetime
from typing import Optional, List

from sqlalchemy import (
    String, Integer, DateTime, Date, Boolean, Text, JSON,
    ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


class JurisdictionModel(Base):
    """
    A city, county, or state.

    Cities point at their county and counties at their state through
    parent_id.
    """

    __tablename__ = "jurisdictions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("jurisdictions.id"),
        nullable=True,
        index=True
    )

    parent: Mapped[Optional["JurisdictionModel"]] = relationship(remote_side="JurisdictionModel.id")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<JurisdictionModel(id={self.id}, slug={self.slug})>"


class SourceModel(Base):
    """
    A configured scraping target (connector) tied to a jurisdiction.
    """

    __tablename__ = "sources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    parser_key: Mapped[str] = mapped_column(String(100), nullable=False)
    jurisdiction_id: Mapped[int] = mapped_column(
        ForeignKey("jurisdictions.id"),
        nullable=False,
        index=True
    )
    schedule: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    last_run_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    jurisdiction: Mapped[JurisdictionModel] = relationship(lazy="joined")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<SourceModel(id={self.id}, key={self.key}, parser={self.parser_key})>"


class LegislationModel(Base):
    """
    Database model for ordinances, resolutions, and bills.

    Unique per (source_id, external_id). Sources that key per jurisdiction
    are looked up by (jurisdiction_id, external_id) instead.
    """

    __tablename__ = "legislation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Natural key
    source_id: Mapped[int] = mapped_column(ForeignKey("sources.id"), nullable=False, index=True)
    jurisdiction_id: Mapped[int] = mapped_column(ForeignKey("jurisdictions.id"), nullable=False, index=True)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ai_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="introduced", index=True)

    introduced_at: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    passed_at: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    effective_at: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    doc_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pdf_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    full_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    author: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    author_role: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    coauthors: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    district_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    content_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('source_id', 'external_id', name='uq_legislation_natural_key'),
        Index('idx_legislation_jurisdiction_external', 'jurisdiction_id', 'external_id'),
    )

    def __repr__(self) -> str:
        return f"<LegislationModel(id={self.id}, external_id={self.external_id})>"


class MeetingModel(Base):
    """Database model for public meetings"""

    __tablename__ = "meetings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    source_id: Mapped[int] = mapped_column(ForeignKey("sources.id"), nullable=False, index=True)
    jurisdiction_id: Mapped[int] = mapped_column(ForeignKey("jurisdictions.id"), nullable=False, index=True)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    body_name: Mapped[str] = mapped_column(String(255), nullable=False)
    meeting_type: Mapped[str] = mapped_column(String(30), nullable=False, default="committee")
    is_legislative: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    starts_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    agenda_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    agenda_status: Mapped[str] = mapped_column(String(20), nullable=False, default="unavailable")
    agenda_available_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    minutes_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    minutes_status: Mapped[str] = mapped_column(String(20), nullable=False, default="not_published")
    minutes_available_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    source_detail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="upcoming", index=True)

    extracted_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ai_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    content_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('source_id', 'external_id', name='uq_meeting_natural_key'),
        Index('idx_meeting_jurisdiction_start', 'jurisdiction_id', 'starts_at'),
    )

    def __repr__(self) -> str:
        return f"<MeetingModel(id={self.id}, body={self.body_name}, starts_at={self.starts_at})>"


class ElectionModel(Base):
    """Database model for elections"""

    __tablename__ = "elections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    source_id: Mapped[int] = mapped_column(ForeignKey("sources.id"), nullable=False, index=True)
    jurisdiction_id: Mapped[int] = mapped_column(ForeignKey("jurisdictions.id"), nullable=False, index=True)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False, default="general")
    # Column is "date"; the attribute name avoids shadowing datetime.date
    election_date: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    registration_deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    info_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    results: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    content_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('source_id', 'external_id', name='uq_election_natural_key'),
    )

    def __repr__(self) -> str:
        return f"<ElectionModel(id={self.id}, name={self.name}, date={self.election_date})>"


class TrackedTermModel(Base):
    """A user's keyword set monitored against new legislation and meetings"""

    __tablename__ = "tracked_terms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    keywords: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    jurisdictions: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    alert_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    match_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_checked_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<TrackedTermModel(id={self.id}, name={self.name})>"


class TermMatchModel(Base):
    """A tracked term hitting a legislation or meeting item"""

    __tablename__ = "term_matches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tracked_term_id: Mapped[int] = mapped_column(ForeignKey("tracked_terms.id"), nullable=False, index=True)
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    matched_keywords: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    notified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('tracked_term_id', 'item_type', 'item_id', name='uq_term_match'),
    )


class IngestRunModel(Base):
    """
    Database model for tracking connector runs.

    Persisted form of IngestStats, one row per run of one source.
    """

    __tablename__ = "ingest_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_id: Mapped[int] = mapped_column(ForeignKey("sources.id"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="running", index=True)
    log: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    stats_json: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index('idx_ingest_run_source_started', 'source_id', 'started_at'),
    )

    def __repr__(self) -> str:
        return f"<IngestRunModel(id={self.id}, source_id={self.source_id}, status={self.status})>"
