"""Helpers shared by the test modules."""

from datetime import date, datetime
from typing import Callable, List, Optional

import httpx

from govwatch.config import FetchConfig, IngestConfig
from govwatch.db.models import ElectionModel, MeetingModel
from govwatch.db.repositories import JurisdictionRepository, SourceRepository
from govwatch.db.session import Database
from govwatch.utils.http_client import PoliteFetcher
from govwatch.utils.rate_limiter import HostRateLimiter
from govwatch.utils.robots import RobotsCache


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers the requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_fetcher(
    handler: Callable[[httpx.Request], httpx.Response],
    sleep: Optional[SleepRecorder] = None,
    **config_overrides,
) -> PoliteFetcher:
    """PoliteFetcher over an httpx.MockTransport with robots checks off."""
    config = FetchConfig(respect_robots_txt=False, **config_overrides)
    return PoliteFetcher(
        config=config,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        rate_limiter=HostRateLimiter(max_requests_per_minute=1000),
        robots=RobotsCache(),
        sleep=sleep or SleepRecorder(),
    )


def quiet_ingest_config(**overrides) -> IngestConfig:
    """Ingest settings without pauses between sources."""
    return IngestConfig(source_pause_seconds=0, **overrides)


async def make_database(url: str = "sqlite+aiosqlite://") -> Database:
    database = Database(url)
    await database.initialize()
    await database.create_tables()
    return database


async def seed_austin(database: Database) -> dict:
    """Texas > Travis County > Austin plus one source per Austin parser."""
    async with database.session() as session:
        jurisdictions = JurisdictionRepository(session)
        texas = await jurisdictions.get_or_create("texas", "Texas", "state")
        travis = await jurisdictions.get_or_create("travis-county-tx", "Travis County", "county", parent=texas)
        austin = await jurisdictions.get_or_create("austin-tx", "Austin", "city", parent=travis)

        sources = SourceRepository(session)
        meetings = await sources.get_or_create(
            "austin-council-meetings",
            name="Austin City Council Meetings",
            kind="meetings",
            parser_key="austin_council_meetings",
            url="https://www.austintexas.gov/council",
            jurisdiction_id=austin.id,
            enabled=True,
        )
        ordinances = await sources.get_or_create(
            "austin-ordinances",
            name="Austin Ordinances",
            kind="ordinances",
            parser_key="austin_ordinances",
            url="https://services.austintexas.gov/edims/search.cfm",
            jurisdiction_id=austin.id,
            enabled=True,
        )
        elections = await sources.get_or_create(
            "travis-elections",
            name="Travis County Elections",
            kind="elections",
            parser_key="travis_elections",
            url="https://www.traviscountyclerk.org/elections",
            jurisdiction_id=travis.id,
            enabled=False,
        )

        return {
            "texas": texas.id,
            "travis": travis.id,
            "austin": austin.id,
            "meetings_source": meetings.id,
            "ordinances_source": ordinances.id,
            "elections_source": elections.id,
        }


async def seed_calendar(database: Database, ids: dict) -> dict:
    """Two Austin meetings, one county meeting, and a county election."""
    async with database.session() as session:
        council = MeetingModel(
            source_id=ids["meetings_source"],
            jurisdiction_id=ids["austin"],
            external_id="austin-council-2025-10-09",
            title="Regular Council Meeting",
            body_name="City Council",
            meeting_type="city_council",
            is_legislative=True,
            starts_at=datetime(2025, 10, 9, 15, 0),
            location="Council Chambers, 301 W. 2nd St",
        )
        planning = MeetingModel(
            source_id=ids["meetings_source"],
            jurisdiction_id=ids["austin"],
            external_id="austin-planning-2025-10-14",
            title="Planning Commission",
            body_name="Planning Commission",
            starts_at=datetime(2025, 10, 14, 23, 0),
            ends_at=datetime(2025, 10, 15, 2, 0),
        )
        court = MeetingModel(
            source_id=ids["elections_source"],
            jurisdiction_id=ids["travis"],
            external_id="travis-court-2025-10-07",
            title="Commissioners Court",
            body_name="Commissioners Court",
            starts_at=datetime(2025, 10, 7, 14, 0),
        )
        election = ElectionModel(
            source_id=ids["elections_source"],
            jurisdiction_id=ids["travis"],
            external_id="travis-2025-11-04",
            name="November 4, 2025 Constitutional Amendment Election",
            election_date=date(2025, 11, 4),
        )
        session.add_all([council, planning, court, election])
        await session.flush()
        return {
            "council": council.id,
            "planning": planning.id,
            "court": court.id,
            "election": election.id,
        }
