"""
Connector run orchestration.

Runs one configured source end to end: open an ingest_run row, fetch and
enrich through the adapter, upsert each record in its own transaction,
feed new items to tracked-term matching and agenda text to the agenda
extractor, then finalize the run and the source's last status.

Responsibility: Execute source runs and record their outcome
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Type

from sqlalchemy.exc import SQLAlchemyError

from ..adapters.base_adapter import BaseAdapter
from ..adapters.registry import build_adapter
from ..config import IngestConfig, settings
from ..db.repositories import (
    ElectionRepository,
    IngestRunRepository,
    JurisdictionRepository,
    LegislationRepository,
    MeetingRepository,
    PersistenceStatus,
    RecordRepository,
    SourceRepository,
)
from ..db.session import Database, db
from ..exceptions import GovWatchError, SourceDisabledError, SourceNotFoundError
from ..models.ingest_stats import IngestStats, RunStatus
from ..models.meeting import MeetingRecord
from ..orchestration.ingest_pipeline import IngestPipeline
from ..parsing.agenda_extractor import extract_legislation_from_agenda
from ..utils.http_client import PoliteFetcher
from .ai_service import AIService
from .alert_notifier import AlertNotifier
from .tracked_terms_service import TrackedTermsService

logger = logging.getLogger(__name__)

REPOSITORIES: Dict[str, Type[RecordRepository]] = {
    "legislation": LegislationRepository,
    "meeting": MeetingRepository,
    "election": ElectionRepository,
}

TRACKED_KINDS = ("legislation", "meeting")


@dataclass
class SourceSnapshot:
    """Detached copy of the source row used while the run is in progress."""

    id: int
    key: str
    parser_key: str
    url: Optional[str]
    jurisdiction_id: int
    jurisdiction_slug: str


@dataclass
class ConnectorRunResult:
    """Outcome of one source run."""

    source_id: int
    source_key: str
    status: RunStatus
    log: str
    stats: IngestStats
    run_id: Optional[int] = None
    new_item_ids: Dict[str, List[int]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_id": self.source_id,
            "source_key": self.source_key,
            "run_id": self.run_id,
            "status": self.status.value,
            "log": self.log,
            "stats": self.stats.model_dump(mode="json"),
        }


class ConnectorService:
    """
    Runs sources sequentially on the shared event loop.

    Example:
        service = ConnectorService()
        result = await service.run_source(source_id=1)
        results = await service.run_scope(["austin-tx"])
    """

    def __init__(
        self,
        database: Optional[Database] = None,
        fetcher: Optional[PoliteFetcher] = None,
        ai_service: Optional[AIService] = None,
        notifier: Optional[AlertNotifier] = None,
        ingest_config: Optional[IngestConfig] = None,
        now: Optional[datetime] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.database = database or db
        self.fetcher = fetcher or PoliteFetcher()
        self.ai_service = ai_service or AIService()
        self.notifier = notifier or AlertNotifier()
        self.config = ingest_config or settings.ingest
        self._now = now
        self._sleep = sleep or asyncio.sleep
        self.pipeline = IngestPipeline(self.fetcher, ai_service=self.ai_service, now=now)

    async def close(self) -> None:
        await self.fetcher.close()
        await self.ai_service.close()
        await self.notifier.close()

    # MARK: - Runs

    async def run_source(self, source_id: int, **adapter_kwargs: Any) -> ConnectorRunResult:
        """
        Run one source.

        Raises:
            SourceNotFoundError: No source with that id
            SourceDisabledError: The source is disabled
        """
        source, run_id = await self._open_run(source_id)
        logger.info(f"Running connector: {source.key}")

        stats = IngestStats(max_errors=self.config.max_recorded_errors)
        new_item_ids: Dict[str, List[int]] = {}
        log: str

        try:
            adapter = build_adapter(
                source.parser_key,
                self.fetcher,
                url=source.url,
                ingest_config=self.config,
                now=self._now,
            )
            response = await self.pipeline.fetch_and_enrich(adapter, stats, **adapter_kwargs)

            if stats.failed:
                message = response.errors[0].message if response.errors else response.status.value
                log = f"Error: {message}"
            else:
                new_item_ids = await self._persist_records(adapter, response.data or [], source, stats)
                log = stats.summary_line()
        except Exception as e:
            stats.failed = True
            stats.add_error(str(e))
            log = f"Error: {e}"
            logger.error(f"Connector {source.key} failed: {e}", exc_info=True)

        status = stats.resolve_status()
        await self._close_run(source.id, run_id, status, log, stats)

        logger.info(f"Connector {source.key} finished with status {status.value}: {log}")
        return ConnectorRunResult(
            source_id=source.id,
            source_key=source.key,
            status=status,
            log=log,
            stats=stats,
            run_id=run_id,
            new_item_ids=new_item_ids,
        )

    async def run_scope(self, jurisdiction_slugs: Sequence[str]) -> List[ConnectorRunResult]:
        """Run every enabled source of the given jurisdictions, one after another."""
        async with self.database.session() as session:
            sources = await SourceRepository(session).enabled_for_jurisdictions(jurisdiction_slugs)
            source_ids = [source.id for source in sources]

        logger.info(f"Running {len(source_ids)} sources for scope {', '.join(jurisdiction_slugs)}")
        return await self._run_many(source_ids)

    async def run_all(self) -> List[ConnectorRunResult]:
        async with self.database.session() as session:
            source_ids = [source.id for source in await SourceRepository(session).list_all(enabled_only=True)]

        logger.info(f"Running all {len(source_ids)} enabled sources")
        return await self._run_many(source_ids)

    async def _run_many(self, source_ids: Sequence[int]) -> List[ConnectorRunResult]:
        results: List[ConnectorRunResult] = []
        for index, source_id in enumerate(source_ids):
            if index > 0:
                await self._sleep(self.config.source_pause_seconds)
            try:
                results.append(await self.run_source(source_id))
            except GovWatchError as e:
                logger.error(f"Skipping source {source_id}: {e}")
        return results

    # MARK: - Run bookkeeping

    async def _open_run(self, source_id: int) -> tuple[SourceSnapshot, int]:
        async with self.database.session() as session:
            source = await SourceRepository(session).get_by_id(source_id)
            if source is None:
                raise SourceNotFoundError(f"Connector not found: {source_id}")
            if not source.enabled:
                raise SourceDisabledError(f"Connector is disabled: {source.key}")

            run = await IngestRunRepository(session).start(source.id)
            snapshot = SourceSnapshot(
                id=source.id,
                key=source.key,
                parser_key=source.parser_key,
                url=source.url,
                jurisdiction_id=source.jurisdiction_id,
                jurisdiction_slug=source.jurisdiction.slug,
            )
            return snapshot, run.id

    async def _close_run(
        self,
        source_id: int,
        run_id: int,
        status: RunStatus,
        log: str,
        stats: IngestStats,
    ) -> None:
        async with self.database.session() as session:
            await IngestRunRepository(session).finish(run_id, status, log, stats)
            await SourceRepository(session).mark_run(source_id, status.value)

    # MARK: - Persistence

    async def _persist_records(
        self,
        adapter: BaseAdapter,
        records: List[Any],
        source: SourceSnapshot,
        stats: IngestStats,
    ) -> Dict[str, List[int]]:
        """
        Upsert records one per transaction.

        A failing record is recorded in stats and the loop moves on; records
        saved before it stay saved.
        """
        kind = adapter.record_kind
        new_ids: Dict[str, List[int]] = {"legislation": [], "meeting": []}

        for record in records:
            item_id = await self._upsert_one(kind, record, source, stats, adapter.natural_key_scope)
            if item_id is not None and kind in TRACKED_KINDS:
                new_ids[kind].append(item_id)
                await self._check_tracked_terms(kind, item_id)

            if isinstance(record, MeetingRecord) and record.extracted_text:
                for legislation_id in await self._persist_agenda_items(record, source, stats):
                    new_ids["legislation"].append(legislation_id)
                    await self._check_tracked_terms("legislation", legislation_id)

        return new_ids

    async def _upsert_one(
        self,
        kind: str,
        record: Any,
        source: SourceSnapshot,
        stats: IngestStats,
        scope: str,
    ) -> Optional[int]:
        """Upsert and count one record; returns the row id when it was newly created."""
        try:
            async with self.database.session() as session:
                repository = REPOSITORIES[kind](session)
                outcome = await repository.upsert(record, source.id, source.jurisdiction_id, scope)
                row_id = outcome.model.id
        except SQLAlchemyError as e:
            stats.add_error(f"Failed to process {kind} {record.external_id}: {e}")
            logger.error(f"Failed to upsert {kind} {record.external_id}: {e}")
            return None

        if outcome.status == PersistenceStatus.CREATED:
            stats.new += 1
            return row_id
        if outcome.status == PersistenceStatus.UPDATED:
            stats.updated += 1
        else:
            stats.unchanged += 1
        return None

    async def _persist_agenda_items(
        self,
        meeting: MeetingRecord,
        source: SourceSnapshot,
        stats: IngestStats,
    ) -> List[int]:
        """Upsert legislation found in a meeting's agenda text, keyed per jurisdiction."""
        created: List[int] = []
        items = extract_legislation_from_agenda(meeting.extracted_text)
        for item in items:
            record = item.to_record(source.jurisdiction_slug, doc_url=meeting.agenda_url)
            item_id = await self._upsert_one("legislation", record, source, stats, "jurisdiction")
            if item_id is not None:
                created.append(item_id)

        if items:
            logger.info(f"Agenda for {meeting.external_id} yielded {len(items)} legislation items")
        return created

    async def _check_tracked_terms(self, kind: str, item_id: int) -> None:
        """Tracked-term failures are logged and never fail the run."""
        try:
            async with self.database.session() as session:
                item = await REPOSITORIES[kind](session).get_by_id(item_id)
                if item is None:
                    return
                await TrackedTermsService(session, notifier=self.notifier).check_item(kind, item)
        except (SQLAlchemyError, GovWatchError) as e:
            logger.error(f"Tracked term check failed for {kind} {item_id}: {e}")


async def jurisdiction_scope(database: Database, slugs: Sequence[str]) -> List[str]:
    """
    Expand "city:austin-tx" / "county:travis-county-tx" style scopes to slugs.

    A county scope also covers its child cities; bare slugs pass through.
    """
    expanded: List[str] = []
    async with database.session() as session:
        repository = JurisdictionRepository(session)
        for raw in slugs:
            kind, _, slug = raw.partition(":") if ":" in raw else ("", "", raw)
            slug = slug.strip()
            if not slug:
                continue
            if slug not in expanded:
                expanded.append(slug)
            if kind == "county":
                county = await repository.get_by_slug(slug)
                if county is not None:
                    for child in await repository.children_of(county.id):
                        if child.slug not in expanded:
                            expanded.append(child.slug)
    return expanded
