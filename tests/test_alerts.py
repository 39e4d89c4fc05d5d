import asyncio
from datetime import datetime

import httpx
import pytest

from helpers import make_database, seed_austin
from govwatch.config import AlertConfig
from govwatch.db.models import LegislationModel, MeetingModel
from govwatch.db.repositories import TrackedTermRepository
from govwatch.exceptions import NotificationError
from govwatch.services.alert_notifier import AlertNotifier, render_alert_html
from govwatch.services.tracked_terms_service import TrackedTermsService, match_keywords


def _notifier(handler, api_key="re_test") -> AlertNotifier:
    return AlertNotifier(
        config=AlertConfig(resend_api_key=api_key, frontend_url="https://localgov.example/"),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_match_keywords_is_case_insensitive() -> None:
    content = "rezoning of the east riverside corridor"
    assert match_keywords(content, ["Riverside", "stadium", "", "REZONING"]) == ["Riverside", "REZONING"]


def test_alert_html_escapes_user_text() -> None:
    html = render_alert_html(
        term_name="<b>watch</b>",
        item_type="meeting",
        item_id=7,
        title="Budget & Audit",
        jurisdiction_slug="austin-tx",
        matched_keywords=["budget"],
        ai_summary=None,
        frontend_url="https://localgov.example/",
    )

    assert "&lt;b&gt;watch&lt;/b&gt;" in html
    assert "Budget &amp; Audit" in html
    assert "https://localgov.example/meetings/7" in html
    assert "Summary:" not in html


def test_send_requires_api_key_and_success_status() -> None:
    async def scenario():
        with pytest.raises(NotificationError):
            await _notifier(lambda request: httpx.Response(200), api_key=None).send("a@example.com", "s", "<p/>")
        with pytest.raises(NotificationError):
            await _notifier(lambda request: httpx.Response(422, text="bad to")).send("a@example.com", "s", "<p/>")

    asyncio.run(scenario())


async def _seed_items(database, ids):
    async with database.session() as session:
        legislation = LegislationModel(
            source_id=ids["ordinances_source"],
            jurisdiction_id=ids["austin"],
            external_id="20251002-014",
            title="Establishing a vacation rental registration fee",
        )
        county_meeting = MeetingModel(
            source_id=ids["elections_source"],
            jurisdiction_id=ids["travis"],
            external_id="travis-2025-10-14",
            title="Commissioners Court vacation rental briefing",
            body_name="Commissioners Court",
            starts_at=datetime(2025, 10, 14, 14, 0),
        )
        session.add_all([legislation, county_meeting])
        await session.flush()
        return legislation.id, county_meeting.id


def test_terms_match_within_their_jurisdictions_once() -> None:
    sent = []

    def resend(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        legislation_id, meeting_id = await _seed_items(database, ids)
        async with database.session() as session:
            await TrackedTermRepository(session).create(
                email="resident@example.com",
                name="Rentals",
                keywords=["vacation rental"],
                jurisdictions=["austin-tx"],
            )

        notifier = _notifier(resend)
        async with database.session() as session:
            service = TrackedTermsService(session, notifier=notifier)
            legislation = await session.get(LegislationModel, legislation_id)
            meeting = await session.get(MeetingModel, meeting_id)
            counts = [
                await service.check_item("legislation", legislation),
                await service.check_item("legislation", legislation),
                await service.check_item("meeting", meeting),
            ]
        await notifier.close()
        await database.close()
        return counts

    counts = asyncio.run(scenario())

    # The county meeting is outside the term's jurisdictions
    assert counts == [1, 0, 0]
    assert len(sent) == 1


def test_failed_delivery_keeps_match_unnotified() -> None:
    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        legislation_id, _ = await _seed_items(database, ids)
        async with database.session() as session:
            term = await TrackedTermRepository(session).create(
                email="resident@example.com",
                name="Rentals",
                keywords=["registration fee"],
                jurisdictions=["austin-tx"],
            )
            term_id = term.id

        notifier = _notifier(lambda request: httpx.Response(500, text="down"))
        async with database.session() as session:
            service = TrackedTermsService(session, notifier=notifier)
            count = await service.check_item("legislation", await session.get(LegislationModel, legislation_id))
        async with database.session() as session:
            matches = await TrackedTermRepository(session).matches_for_term(term_id)
        await notifier.close()
        await database.close()
        return count, matches

    count, matches = asyncio.run(scenario())

    assert count == 1
    assert matches[0].notified is False
