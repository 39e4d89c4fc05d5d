"""
Ingestion status endpoint.

Responsibility: Report the latest run of every source
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from govwatch.db.repositories import IngestRunRepository, SourceRepository
from govwatch.db.session import get_db
from api.v1.schemas.status import IngestRunResponse, SourceStatusResponse, StatusResponse

router = APIRouter()


@router.get("/status", response_model=StatusResponse)
async def get_status(db: AsyncSession = Depends(get_db)):
    """Latest ingest run per source, including sources that never ran."""
    sources = await SourceRepository(db).list_all()
    latest = {run.source_id: run for run in await IngestRunRepository(db).latest_per_source()}

    items = []
    for source in sources:
        run = latest.get(source.id)
        items.append(SourceStatusResponse(
            source_id=source.id,
            source_key=source.key,
            source_name=source.name,
            enabled=source.enabled,
            last_status=source.last_status,
            last_run_at=source.last_run_at,
            latest_run=IngestRunResponse.model_validate(run) if run else None,
        ))

    return StatusResponse(sources=items, total=len(items))
