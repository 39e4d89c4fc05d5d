"""
Shared upsert machinery for scraped records.

Responsibility: Natural-key lookup plus content-hash change detection for
legislation, meeting and election rows
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Optional, Type, TypeVar
import logging

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...utils.hash_utils import compute_record_hash

logger = logging.getLogger(__name__)

M = TypeVar("M")


class PersistenceStatus(Enum):
    """Outcome classification for record persistence operations."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(slots=True)
class PersistenceOutcome(Generic[M]):
    """Represents the result of persisting a single record."""

    model: M
    status: PersistenceStatus
    content_hash: str


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class RecordRepository(Generic[M]):
    """
    Base repository for records keyed by (source_id, external_id).

    Subclasses set model_class and may override record_to_columns() when
    attribute names differ from the record's field names.
    """

    model_class: Type[M]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, record_id: int) -> Optional[M]:
        result = await self.session.execute(
            select(self.model_class).where(self.model_class.id == record_id)
        )
        return result.scalar_one_or_none()

    async def get_by_natural_key(
        self,
        external_id: str,
        source_id: int,
        jurisdiction_id: Optional[int] = None,
        scope: str = "source",
    ) -> Optional[M]:
        """
        Find an existing row.

        Args:
            scope: "source" looks up (source_id, external_id);
                "jurisdiction" looks up (jurisdiction_id, external_id)
        """
        model = self.model_class
        query = select(model).where(model.external_id == external_id)
        if scope == "jurisdiction" and jurisdiction_id is not None:
            query = query.where(model.jurisdiction_id == jurisdiction_id)
        else:
            query = query.where(model.source_id == source_id)

        result = await self.session.execute(query.order_by(model.id).limit(1))
        return result.scalars().first()

    def record_to_columns(self, record: BaseModel) -> Dict[str, Any]:
        data = record.model_dump(exclude={"external_id"})
        return {key: _column_value(value) for key, value in data.items()}

    async def create(
        self,
        record: BaseModel,
        source_id: int,
        jurisdiction_id: int,
        content_hash: str,
    ) -> M:
        row = self.model_class(
            source_id=source_id,
            jurisdiction_id=jurisdiction_id,
            external_id=record.external_id,
            content_hash=content_hash,
            **self.record_to_columns(record),
        )
        self.session.add(row)
        await self.session.flush()  # Get ID without committing

        logger.debug(f"Created {self.model_class.__name__}: {record.external_id}")
        return row

    async def update(self, row: M, record: BaseModel, content_hash: str) -> M:
        for key, value in self.record_to_columns(record).items():
            setattr(row, key, value)
        row.content_hash = content_hash
        row.updated_at = datetime.utcnow()

        await self.session.flush()

        logger.debug(f"Updated {self.model_class.__name__}: {record.external_id}")
        return row

    async def upsert(
        self,
        record: BaseModel,
        source_id: int,
        jurisdiction_id: int,
        scope: str = "source",
    ) -> PersistenceOutcome[M]:
        """
        Insert, update, or leave alone a record by natural key.

        Rows whose stored content hash matches are not touched at all.
        """
        content_hash = compute_record_hash(record)
        existing = await self.get_by_natural_key(record.external_id, source_id, jurisdiction_id, scope)

        if existing is not None:
            if existing.content_hash == content_hash:
                logger.debug(f"Skipped update for {record.external_id} (unchanged content)")
                return PersistenceOutcome(existing, PersistenceStatus.UNCHANGED, content_hash)

            updated = await self.update(existing, record, content_hash)
            return PersistenceOutcome(updated, PersistenceStatus.UPDATED, content_hash)

        created = await self.create(record, source_id, jurisdiction_id, content_hash)
        return PersistenceOutcome(created, PersistenceStatus.CREATED, content_hash)
