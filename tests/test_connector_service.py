import asyncio
from datetime import datetime
from typing import Optional

import httpx
import pytest
from sqlalchemy import func, select

from helpers import SleepRecorder, make_database, make_fetcher, quiet_ingest_config, seed_austin
from govwatch.config import AlertConfig, IngestConfig
from govwatch.db.models import LegislationModel, MeetingModel, SourceModel
from govwatch.db.repositories import IngestRunRepository, TrackedTermRepository
from govwatch.exceptions import SourceDisabledError, SourceNotFoundError
from govwatch.models.ingest_stats import RunStatus
from govwatch.services.alert_notifier import AlertNotifier
from govwatch.services.connector_service import ConnectorService, jurisdiction_scope

NOW = datetime(2025, 10, 1, 12, 0)

ORDINANCES_HTML = """
<table class="ordinances">
  <tr><th>Number</th><th>Title</th><th>Date</th><th>Status</th></tr>
  <tr>
    <td><a href="document.cfm?id=438320">20250925-001</a></td>
    <td>Amending City Code Chapter 25-2 related to land development</td>
    <td>09/25/2025</td>
    <td>Passed</td>
  </tr>
  <tr>
    <td>20251002-014</td>
    <td>Establishing a rental registration fee for vacation rental operators</td>
    <td>10/02/2025</td>
    <td>Introduced</td>
  </tr>
</table>
"""

MEETINGS_HTML = """
<div class="meeting-entry">
  <h3 class="meeting-title">Regular Council Meeting</h3>
  <span class="meeting-date">October 9, 2025</span>
  <span class="meeting-time">10:00 AM</span>
  <a href="/edims/document.cfm?id=440001">Agenda</a>
</div>
"""

AGENDA_TEXT = """
Item 7. Ordinance No. 2025-014: Amending City Code Chapter 25-2 relating to residential zoning
Item 8. Resolution No. 2025-31: Adopting the affordable housing investment plan for fiscal year 2026
"""


def _site(ordinances_html: str = ORDINANCES_HTML, meetings_html: str = MEETINGS_HTML):
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if "edims/search.cfm" in url:
            return httpx.Response(200, text=ordinances_html)
        if url.endswith("/council"):
            return httpx.Response(200, text=meetings_html)
        return httpx.Response(404)

    return handler


class FakeAgendaExtractor:
    def __init__(self, text: Optional[str]) -> None:
        self.text = text
        self.urls = []

    async def extract(self, pdf_url: Optional[str]) -> Optional[str]:
        if not pdf_url:
            return None
        self.urls.append(pdf_url)
        return self.text


def _service(database, handler=None, **kwargs) -> ConnectorService:
    kwargs.setdefault("ingest_config", quiet_ingest_config())
    return ConnectorService(
        database=database,
        fetcher=make_fetcher(handler or _site()),
        now=NOW,
        **kwargs,
    )


async def _count(database, model) -> int:
    async with database.session() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


def test_repeated_runs_do_not_duplicate_records() -> None:
    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        service = _service(database)
        try:
            first = await service.run_source(ids["ordinances_source"])
            second = await service.run_source(ids["ordinances_source"])
            async with database.session() as session:
                keys = (await session.execute(
                    select(LegislationModel.source_id, LegislationModel.external_id)
                )).all()
                runs = await IngestRunRepository(session).for_source(ids["ordinances_source"])
                source = await session.get(SourceModel, ids["ordinances_source"])
                last_status = source.last_status
        finally:
            await service.close()
            await database.close()
        return first, second, keys, runs, last_status

    first, second, keys, runs, last_status = asyncio.run(scenario())

    assert first.status == RunStatus.SUCCESS
    assert first.stats.new == 2
    assert first.log == "Completed: 2 new, 0 updated, 0 errors"
    assert sorted(first.new_item_ids["legislation"]) == [1, 2]

    assert second.stats.new == 0
    assert second.stats.unchanged == 2
    assert second.new_item_ids["legislation"] == []

    assert len(keys) == 2
    assert len(set(keys)) == 2
    assert len(runs) == 2
    assert {run.status for run in runs} == {"success"}
    assert {run.stats_json["found"] for run in runs} == {2}
    assert last_status == "success"


def test_changed_content_updates_existing_row() -> None:
    changed_html = ORDINANCES_HTML.replace("<td>Introduced</td>", "<td>Adopted</td>")

    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        first_service = _service(database)
        second_service = _service(database, handler=_site(ordinances_html=changed_html))
        try:
            await first_service.run_source(ids["ordinances_source"])
            result = await second_service.run_source(ids["ordinances_source"])
            count = await _count(database, LegislationModel)
        finally:
            await first_service.close()
            await second_service.close()
            await database.close()
        return result, count

    result, count = asyncio.run(scenario())

    assert result.stats.updated == 1
    assert result.stats.unchanged == 1
    assert count == 2


def test_unknown_and_disabled_sources_are_rejected() -> None:
    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        service = _service(database)
        try:
            with pytest.raises(SourceNotFoundError):
                await service.run_source(999)
            with pytest.raises(SourceDisabledError):
                await service.run_source(ids["elections_source"])
        finally:
            await service.close()
            await database.close()

    asyncio.run(scenario())


def test_unreachable_source_marks_run_as_error() -> None:
    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        service = _service(database, handler=lambda request: httpx.Response(503))
        try:
            result = await service.run_source(ids["ordinances_source"])
            async with database.session() as session:
                source = await session.get(SourceModel, ids["ordinances_source"])
                last_status = source.last_status
            count = await _count(database, LegislationModel)
        finally:
            await service.close()
            await database.close()
        return result, last_status, count

    result, last_status, count = asyncio.run(scenario())

    assert result.status == RunStatus.ERROR
    assert result.log.startswith("Error: ")
    assert result.stats.errors == 1
    assert last_status == "error"
    assert count == 0


def test_empty_listing_runs_degraded_with_sample_meeting() -> None:
    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        service = _service(database, handler=_site(meetings_html="<html></html>"))
        try:
            result = await service.run_source(ids["meetings_source"])
            async with database.session() as session:
                meeting = (await session.execute(select(MeetingModel))).scalar_one()
        finally:
            await service.close()
            await database.close()
        return result, meeting

    result, meeting = asyncio.run(scenario())

    assert result.status == RunStatus.DEGRADED
    assert result.stats.fixture_used is True
    assert meeting.meeting_type == "city_council"
    assert meeting.is_legislative is True


def test_agenda_text_becomes_jurisdiction_scoped_legislation() -> None:
    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        service = _service(database)
        extractor = FakeAgendaExtractor(AGENDA_TEXT)
        service.pipeline.pdf_extractor = extractor
        try:
            first = await service.run_source(ids["meetings_source"])
            second = await service.run_source(ids["meetings_source"])
            async with database.session() as session:
                external_ids = (await session.execute(
                    select(LegislationModel.external_id).order_by(LegislationModel.external_id)
                )).scalars().all()
                meeting = (await session.execute(select(MeetingModel))).scalar_one()
        finally:
            await service.close()
            await database.close()
        return first, second, external_ids, meeting, extractor

    first, second, external_ids, meeting, extractor = asyncio.run(scenario())

    assert extractor.urls[0] == "https://www.austintexas.gov/edims/document.cfm?id=440001"
    assert first.stats.pdfs_processed == 1
    assert first.stats.new == 3
    assert second.stats.new == 0
    assert external_ids == ["austin-tx-ordinance-2025-014", "austin-tx-resolution-2025-31"]
    assert meeting.extracted_text == AGENDA_TEXT


def test_new_items_trigger_tracked_term_alerts() -> None:
    sent = []

    def resend(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        async with database.session() as session:
            term = await TrackedTermRepository(session).create(
                email="resident@example.com",
                name="Land use watch",
                keywords=["Land Development", "stadium"],
                jurisdictions=["austin-tx"],
            )
            term_id = term.id

        notifier = AlertNotifier(
            config=AlertConfig(resend_api_key="re_test", frontend_url="https://localgov.example"),
            client=httpx.AsyncClient(transport=httpx.MockTransport(resend)),
        )
        service = _service(database, notifier=notifier)
        try:
            await service.run_source(ids["ordinances_source"])
            await service.run_source(ids["ordinances_source"])
            async with database.session() as session:
                repository = TrackedTermRepository(session)
                matches = await repository.matches_for_term(term_id)
                terms = await repository.active_terms()
        finally:
            await service.close()
            await database.close()
        return matches, terms[0]

    matches, term = asyncio.run(scenario())

    assert len(matches) == 1
    assert matches[0].item_type == "legislation"
    assert matches[0].matched_keywords == ["Land Development"]
    assert matches[0].notified is True
    assert term.match_count == 1
    assert len(sent) == 1
    assert sent[0].headers["Authorization"] == "Bearer re_test"


def test_run_scope_runs_enabled_sources_with_pause() -> None:
    sleep = SleepRecorder()

    async def scenario():
        database = await make_database()
        await seed_austin(database)
        service = _service(database, ingest_config=IngestConfig(), sleep=sleep)
        try:
            slugs = await jurisdiction_scope(database, ["county:travis-county-tx"])
            results = await service.run_scope(slugs)
        finally:
            await service.close()
            await database.close()
        return slugs, results

    slugs, results = asyncio.run(scenario())

    assert slugs == ["travis-county-tx", "austin-tx"]
    # The Travis elections source is disabled
    assert sorted(result.source_key for result in results) == ["austin-council-meetings", "austin-ordinances"]
    assert sleep.delays == [1.0]
