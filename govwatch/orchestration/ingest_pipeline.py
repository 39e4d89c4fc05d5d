"""
Ingestion pipeline orchestration.

Runs one adapter and enriches its records before persistence.
Handles the flow: fetch → enrich (PDF text, AI summary/tags, keyword
tags, meeting classification) → return.

Responsibility: Orchestrate adapter fetching and per-record enrichment
"""

from datetime import datetime
from typing import Any, List, Optional
import logging

from ..adapters.base_adapter import BaseAdapter
from ..exceptions import GovWatchError
from ..models.adapter_models import AdapterResponse, AdapterStatus
from ..models.election import ElectionRecord
from ..models.ingest_stats import IngestStats
from ..models.legislation import LegislationRecord
from ..models.meeting import MeetingRecord
from ..parsing.keyword_tags import extract_keyword_tags
from ..parsing.meetings import classify_meeting
from ..parsing.pdf_extractor import PDFExtractor
from ..services.ai_service import AIService
from ..utils.http_client import PoliteFetcher

logger = logging.getLogger(__name__)

FAILED_STATUSES = (AdapterStatus.FAILURE, AdapterStatus.SOURCE_UNAVAILABLE)


class IngestPipeline:
    """
    Orchestrates fetch and enrichment for a single source.

    Pipeline stages:
    1. Fetch records through the adapter
    2. Fold adapter errors and fixture usage into the run stats
    3. Enrich each record sequentially (one failing record never stops the rest)

    Example:
        pipeline = IngestPipeline(fetcher)
        stats = IngestStats()
        response = await pipeline.fetch_and_enrich(adapter, stats)
        records = response.data
    """

    def __init__(
        self,
        fetcher: PoliteFetcher,
        ai_service: Optional[AIService] = None,
        pdf_extractor: Optional[PDFExtractor] = None,
        now: Optional[datetime] = None,
    ):
        """
        Initialize ingest pipeline.

        Args:
            fetcher: Shared polite HTTP client (also used for PDFs)
            ai_service: Summarizer/classifier (defaults to configured gateway)
            pdf_extractor: PDF text extractor (defaults to one on the fetcher)
            now: Reference time for meeting status derivation
        """
        self.fetcher = fetcher
        self.ai_service = ai_service or AIService()
        self.pdf_extractor = pdf_extractor or PDFExtractor(fetcher)
        self._now = now

    @property
    def now(self) -> datetime:
        return self._now or datetime.utcnow()

    async def fetch_and_enrich(
        self,
        adapter: BaseAdapter,
        stats: IngestStats,
        **kwargs: Any
    ) -> AdapterResponse:
        """
        Fetch records from the adapter and enrich them in place.

        Args:
            adapter: Adapter built for the source
            stats: Run counters, updated with found/errors/pdfs/tokens

        Returns:
            The adapter response with enriched records as data
        """
        logger.info(f"Starting ingest pipeline for {adapter.source_name}")

        response = await adapter.fetch(**kwargs)

        for error in response.errors:
            stats.add_error(f"{error.error_type}: {error.message}")

        if response.status in FAILED_STATUSES:
            stats.failed = True
            logger.error(f"Adapter {adapter.source_name} failed: {response.status.value}")
            return response

        stats.fixture_used = stats.fixture_used or response.used_fixture
        stats.skipped += response.metrics.records_skipped

        records = response.data or []
        stats.found += len(records)

        enriched: List[Any] = []
        for record in records:
            try:
                enriched.append(await self.enrich_record(record, stats))
            except GovWatchError as e:
                stats.add_error(f"Failed to enrich {record.external_id}: {e}")
                logger.warning(f"Enrichment failed for {record.external_id}: {e}")
                enriched.append(record)

        logger.info(
            f"Pipeline complete for {adapter.source_name}: {len(enriched)} records, "
            f"{stats.pdfs_processed} PDFs, {stats.ai_tokens_used} AI tokens"
        )
        return response.model_copy(update={"data": enriched})

    async def enrich_record(self, record: Any, stats: IngestStats) -> Any:
        if isinstance(record, LegislationRecord):
            return await self.enrich_legislation(record, stats)
        if isinstance(record, MeetingRecord):
            return await self.enrich_meeting(record, stats)
        if isinstance(record, ElectionRecord):
            return record
        raise TypeError(f"Unsupported record type: {type(record).__name__}")

    async def enrich_legislation(self, record: LegislationRecord, stats: IngestStats) -> LegislationRecord:
        """
        PDF text, AI summary and AI tags; keyword tags when AI gives none.

        Sample records that already carry tags keep them unless the AI
        produces a replacement.
        """
        update = {}
        tags = list(record.tags)

        pdf_text = await self.pdf_extractor.extract(record.pdf_url)
        if pdf_text:
            update["full_text"] = pdf_text
            stats.pdfs_processed += 1

            summary = await self.ai_service.summarize(pdf_text)
            if summary.content:
                update["ai_summary"] = summary.content
                stats.ai_tokens_used += summary.tokens_used

            tag_result = await self.ai_service.classify_tags(pdf_text)
            stats.ai_tokens_used += tag_result.tokens_used
            ai_tags = tag_result.tags()
            tags = ai_tags or extract_keyword_tags(pdf_text)

        if not tags:
            tags = extract_keyword_tags(record.title)

        update["tags"] = tags
        return record.model_copy(update=update)

    async def enrich_meeting(self, record: MeetingRecord, stats: IngestStats) -> MeetingRecord:
        update = {}

        agenda_text = await self.pdf_extractor.extract(record.agenda_url)
        if agenda_text:
            update["extracted_text"] = agenda_text
            stats.pdfs_processed += 1

            summary = await self.ai_service.summarize(agenda_text)
            if summary.content:
                update["ai_summary"] = summary.content
                stats.ai_tokens_used += summary.tokens_used

        tag_source = " ".join(filter(None, [record.title, update.get("ai_summary", record.ai_summary)]))
        update["tags"] = list(record.tags) or extract_keyword_tags(tag_source)

        return classify_meeting(record.model_copy(update=update), self.now)
