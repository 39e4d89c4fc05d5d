import asyncio
from datetime import date, datetime

import pytest

from helpers import make_database, seed_austin, seed_calendar
from govwatch.db.models import LegislationModel
from govwatch.exceptions import GovWatchError
from govwatch.services.digest_service import DigestService, render_digest_html
from govwatch.services.trends_service import TrendsService, week_start_for

# Wednesday; the digest week starts Monday 2025-10-06
NOW = datetime(2025, 10, 8, 12, 0)


async def _seed_digest(database):
    ids = await seed_austin(database)
    await seed_calendar(database, ids)
    async with database.session() as session:
        housing = LegislationModel(
            source_id=ids["ordinances_source"],
            jurisdiction_id=ids["austin"],
            external_id="20251007-002",
            title="Affordable housing bond program",
            tags=["housing"],
            introduced_at=date(2025, 10, 7),
            created_at=datetime(2025, 10, 7, 9, 0),
            updated_at=datetime(2025, 10, 7, 9, 0),
        )
        amended = LegislationModel(
            source_id=ids["ordinances_source"],
            jurisdiction_id=ids["austin"],
            external_id="20250901-010",
            title="Library hours ordinance",
            status="passed",
            created_at=datetime(2025, 9, 1, 9, 0),
            updated_at=datetime(2025, 10, 6, 18, 0),
        )
        county = LegislationModel(
            source_id=ids["elections_source"],
            jurisdiction_id=ids["travis"],
            external_id="travis-court-order-88",
            title="Rezoning of county parcel",
            created_at=datetime(2025, 10, 6, 10, 0),
            updated_at=datetime(2025, 10, 6, 10, 0),
        )
        session.add_all([housing, amended, county])
        await session.flush()
        ids["housing"] = housing.id
        ids["county_item"] = county.id
    return ids


def test_week_start_is_monday() -> None:
    assert week_start_for(date(2025, 10, 8)) == date(2025, 10, 6)
    assert week_start_for(date(2025, 10, 6)) == date(2025, 10, 6)
    assert week_start_for(date(2025, 10, 12)) == date(2025, 10, 6)


def test_weekly_trends_fall_back_to_keyword_tags() -> None:
    async def scenario():
        database = await make_database()
        ids = await _seed_digest(database)
        async with database.session() as session:
            trends = await TrendsService(session).weekly_trends([ids["austin"], ids["travis"]], date(2025, 10, 6))
            empty = await TrendsService(session).weekly_trends([], date(2025, 10, 6))
        await database.close()
        return ids, trends, empty

    ids, trends, empty = asyncio.run(scenario())

    assert [trend.tag for trend in trends] == ["housing", "zoning"]
    assert trends[0].item_ids == [f"legislation:{ids['housing']}"]
    assert trends[1].item_ids == [f"legislation:{ids['county_item']}"]
    assert trends[1].jurisdictions == ["travis-county-tx"]
    assert empty == []


def test_city_and_county_digests() -> None:
    async def scenario():
        database = await make_database()
        await _seed_digest(database)
        async with database.session() as session:
            service = DigestService(session, now=NOW)
            city = await service.build("austin-tx", scope="city")
            county = await service.build("austin-tx", scope="both")
            zoning_only = await service.build("travis-county-tx", scope="county", topics=["zoning"])
        await database.close()
        return city, county, zoning_only

    city, county, zoning_only = asyncio.run(scenario())

    assert city.snapshot.new_legislation == 1
    assert city.snapshot.status_changes == 1
    assert city.snapshot.upcoming_meetings == 2
    assert city.snapshot.upcoming_elections == 0
    assert [item.title for item in city.notable_items] == ["Affordable housing bond program"]
    assert city.notable_items[0].date == "2025-10-07"

    assert county.snapshot.new_legislation == 2
    assert county.snapshot.upcoming_elections == 1
    assert [trend.tag for trend in county.trends] == ["housing", "zoning"]

    assert zoning_only.jurisdiction_name == "Travis County"
    assert [trend.tag for trend in zoning_only.trends] == ["zoning"]


def test_bad_scope_and_unknown_jurisdiction() -> None:
    async def scenario():
        database = await make_database()
        await seed_austin(database)
        async with database.session() as session:
            service = DigestService(session, now=NOW)
            with pytest.raises(ValueError):
                await service.build("austin-tx", scope="state")
            with pytest.raises(GovWatchError):
                await service.build("nowhere-tx")
        await database.close()

    asyncio.run(scenario())


def test_render_digest_html() -> None:
    async def scenario():
        database = await make_database()
        await _seed_digest(database)
        async with database.session() as session:
            digest = await DigestService(session, now=NOW).build("austin-tx")
        await database.close()
        return digest

    html = render_digest_html(asyncio.run(scenario()), "https://localgov.example/")

    assert "Your Weekly Civic Digest: Austin" in html
    assert "<strong>housing</strong>: 1 item</li>" in html
    assert 'href="https://localgov.example/legislation/' in html
    assert "https://localgov.example/settings" in html
