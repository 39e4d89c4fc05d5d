import asyncio
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient

from helpers import make_database, make_fetcher, quiet_ingest_config, seed_austin, seed_calendar
from api.main import app
from api.v1.endpoints.sources import get_connector_service
from govwatch import __version__
from govwatch.config import settings
from govwatch.db.session import get_db
from govwatch.services.connector_service import ConnectorService

ORDINANCES_HTML = """
<table>
  <tr><th>Number</th><th>Title</th><th>Date</th><th>Status</th></tr>
  <tr>
    <td>20251002-014</td>
    <td>Establishing a rental registration fee for vacation rental operators</td>
    <td>10/02/2025</td>
    <td>Introduced</td>
  </tr>
</table>
"""

CALENDAR = "/api/v1/calendar?start=2025-10-01&end=2025-12-01"


def _site(request: httpx.Request) -> httpx.Response:
    if "edims/search.cfm" in str(request.url):
        return httpx.Response(200, text=ORDINANCES_HTML)
    return httpx.Response(404)


@pytest.fixture
def seeded(tmp_path):
    """File-backed SQLite so sessions work from the test client's event loop."""

    async def setup():
        database = await make_database(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
        ids = await seed_austin(database)
        ids.update(await seed_calendar(database, ids))
        return database, ids

    database, ids = asyncio.run(setup())

    async def override_db():
        async with database.session() as session:
            yield session

    async def override_connector_service():
        service = ConnectorService(
            database=database,
            fetcher=make_fetcher(_site),
            ingest_config=quiet_ingest_config(),
        )
        try:
            yield service
        finally:
            await service.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_connector_service] = override_connector_service
    yield TestClient(app), ids
    app.dependency_overrides.clear()
    asyncio.run(database.close())


def test_health() -> None:
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "localgov-watch-api"}


def test_root_reports_configured_app_name() -> None:
    response = TestClient(app).get("/")

    assert response.status_code == 200
    assert response.json()["name"] == f"{settings.app.app_name} API"
    assert response.json()["version"] == __version__
    assert app.title == f"{settings.app.app_name} API"


def test_calendar_json_defaults_to_austin(seeded) -> None:
    client, ids = seeded

    response = client.get(CALENDAR)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [event["id"] for event in body["events"]] == [ids["council"], ids["planning"]]
    assert body["events"][0]["kind"] == "meeting"
    assert body["events"][0]["ends_at"].startswith("2025-10-09T17:00:00")


def test_calendar_scope_and_kinds(seeded) -> None:
    client, ids = seeded

    response = client.get(f"{CALENDAR}&scope=city:austin-tx,county:travis-county-tx&kinds=elections")

    events = response.json()["events"]
    assert [(event["kind"], event["id"], event["all_day"]) for event in events] == [
        ("election", ids["election"], True)
    ]


def test_calendar_ics_download(seeded) -> None:
    client, _ = seeded

    response = client.get(f"{CALENDAR}&format=ics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/calendar")
    assert 'filename="civic-calendar.ics"' in response.headers["content-disposition"]
    assert response.text.count("BEGIN:VEVENT") == 2
    assert "DTEND:20251009T170000Z" in response.text


def test_calendar_bounds_with_offset_are_converted_to_utc(seeded) -> None:
    client, ids = seeded

    # Council meets at 15:00 UTC, i.e. 11:00 at -04:00
    at_meeting = client.get("/api/v1/calendar?start=2025-10-09T11:00:00-04:00&end=2025-12-01").json()
    after_meeting = client.get("/api/v1/calendar?start=2025-10-09T12:00:00-04:00&end=2025-12-01").json()

    assert at_meeting["start"].startswith("2025-10-09T15:00:00")
    assert [event["id"] for event in at_meeting["events"]] == [ids["council"], ids["planning"]]
    assert [event["id"] for event in after_meeting["events"]] == [ids["planning"]]


@pytest.mark.parametrize("query", [
    "",
    "?start=2025-10-01",
    "?start=yesterday-ish&end=2025-10-02",
    "?start=2025-10-02&end=2025-10-01",
])
def test_calendar_rejects_bad_ranges(seeded, query) -> None:
    client, _ = seeded

    assert client.get(f"/api/v1/calendar{query}").status_code == 400


def test_guest_sessions_are_rate_limited(seeded) -> None:
    client, _ = seeded
    guest = f"{CALENDAR}&session_id={uuid.uuid4()}"

    statuses = [client.get(guest).status_code for _ in range(20)]
    limited = client.get(guest)
    other_guest = client.get(f"{CALENDAR}&session_id={uuid.uuid4()}")

    assert statuses == [200] * 20
    assert limited.status_code == 429
    assert int(limited.headers["Retry-After"]) > 0
    assert limited.headers["X-RateLimit-Remaining"] == "0"
    assert limited.json() == {"error": "Rate limit exceeded. Please try again in a minute."}
    assert other_guest.status_code == 200


def test_signed_in_requests_are_not_rate_limited(seeded) -> None:
    client, _ = seeded
    url = f"{CALENDAR}&session_id={uuid.uuid4()}"

    statuses = [
        client.get(url, headers={"Authorization": "Bearer user-token"}).status_code
        for _ in range(25)
    ]

    assert statuses == [200] * 25


def test_list_sources(seeded) -> None:
    client, _ = seeded

    all_sources = client.get("/api/v1/sources").json()
    enabled = client.get("/api/v1/sources?enabled_only=true").json()

    assert all_sources["total"] == 3
    assert sorted(source["key"] for source in enabled["sources"]) == [
        "austin-council-meetings",
        "austin-ordinances",
    ]


def test_run_source_errors(seeded) -> None:
    client, ids = seeded

    assert client.post("/api/v1/sources/999/run").status_code == 404
    assert client.post(f"/api/v1/sources/{ids['elections_source']}/run").status_code == 409


def test_run_source_then_status(seeded) -> None:
    client, ids = seeded

    before = client.get("/api/v1/status").json()
    run = client.post(f"/api/v1/sources/{ids['ordinances_source']}/run")
    after = client.get("/api/v1/status").json()

    assert all(source["latest_run"] is None for source in before["sources"])

    assert run.status_code == 200
    body = run.json()
    assert body["status"] == "success"
    assert body["stats"]["new"] == 1

    by_key = {source["source_key"]: source for source in after["sources"]}
    ordinances = by_key["austin-ordinances"]
    assert ordinances["last_status"] == "success"
    assert ordinances["latest_run"]["id"] == body["run_id"]
    assert by_key["travis-elections"]["latest_run"] is None


def test_scope_run_requires_scope(seeded) -> None:
    client, _ = seeded

    assert client.post("/api/v1/sources/run", json={"scope": []}).status_code == 422
