"""
Repository for ingest run logs.

Responsibility: Open, finalize, and query per-source run records
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import IngestRunModel
from ...models.ingest_stats import IngestStats, RunStatus


class IngestRunRepository:
    """Repository for ingest_runs"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def start(self, source_id: int) -> IngestRunModel:
        run = IngestRunModel(
            source_id=source_id,
            status=RunStatus.RUNNING.value,
            started_at=datetime.utcnow(),
        )
        self.session.add(run)
        await self.session.flush()
        return run

    async def finish(
        self,
        run_id: int,
        status: RunStatus,
        log: str,
        stats: IngestStats,
    ) -> Optional[IngestRunModel]:
        run = await self.session.get(IngestRunModel, run_id)
        if run is None:
            return None
        run.status = status.value
        run.log = log
        run.stats_json = stats.model_dump(mode="json")
        run.finished_at = datetime.utcnow()
        await self.session.flush()
        return run

    async def latest_per_source(self) -> List[IngestRunModel]:
        """Most recent run of every source that has run at least once"""
        latest = (
            select(IngestRunModel.source_id, func.max(IngestRunModel.id).label("max_id"))
            .group_by(IngestRunModel.source_id)
            .subquery()
        )
        result = await self.session.execute(
            select(IngestRunModel)
            .join(latest, IngestRunModel.id == latest.c.max_id)
            .order_by(IngestRunModel.source_id)
        )
        return list(result.scalars().all())

    async def for_source(self, source_id: int, limit: int = 20) -> List[IngestRunModel]:
        result = await self.session.execute(
            select(IngestRunModel)
            .where(IngestRunModel.source_id == source_id)
            .order_by(IngestRunModel.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
