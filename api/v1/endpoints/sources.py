"""
Source (connector) API endpoints.

Lists configured sources and triggers connector runs.

Responsibility: Source endpoints for API v1
"""

from typing import AsyncGenerator
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from govwatch.db.repositories import SourceRepository
from govwatch.db.session import db as database, get_db
from govwatch.exceptions import SourceDisabledError, SourceNotFoundError
from govwatch.services.connector_service import ConnectorRunResult, ConnectorService, jurisdiction_scope
from api.v1.schemas.sources import (
    RunResultResponse,
    ScopeRunRequest,
    ScopeRunResponse,
    SourceListResponse,
    SourceResponse,
)

router = APIRouter()


async def get_connector_service() -> AsyncGenerator[ConnectorService, None]:
    """Connector service bound to the global database, closed after the request"""
    if not database.is_initialized:
        await database.initialize()
    service = ConnectorService(database=database)
    try:
        yield service
    finally:
        await service.close()


def _to_response(result: ConnectorRunResult) -> RunResultResponse:
    return RunResultResponse.model_validate(result.to_dict())


@router.get("/sources", response_model=SourceListResponse)
async def list_sources(
    enabled_only: bool = Query(False, description="Only enabled sources"),
    db: AsyncSession = Depends(get_db)
):
    """List configured sources with their last run status."""
    sources = await SourceRepository(db).list_all(enabled_only=enabled_only)
    return SourceListResponse(
        sources=[SourceResponse.model_validate(source) for source in sources],
        total=len(sources),
    )


@router.post("/sources/run", response_model=ScopeRunResponse)
async def run_scope(
    request: ScopeRunRequest,
    service: ConnectorService = Depends(get_connector_service)
):
    """Run every enabled source in the given jurisdiction scope, one after another."""
    slugs = await jurisdiction_scope(service.database, request.scope)
    results = await service.run_scope(slugs)
    return ScopeRunResponse(
        results=[_to_response(result) for result in results],
        total=len(results),
    )


@router.post("/sources/{source_id}/run", response_model=RunResultResponse)
async def run_source(
    source_id: int,
    service: ConnectorService = Depends(get_connector_service)
):
    """
    Run one source now.

    Returns 404 for an unknown source and 409 for a disabled one.
    """
    try:
        result = await service.run_source(source_id)
    except SourceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SourceDisabledError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _to_response(result)
