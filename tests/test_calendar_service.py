import asyncio
from datetime import datetime

from helpers import make_database, seed_austin, seed_calendar
from govwatch.models.calendar import CalendarEvent, CalendarEventKind
from govwatch.services.calendar_service import CalendarService, escape_ics_text, generate_ics, parse_scope

STAMP = datetime(2025, 10, 1, 12, 0)


def _vevents(ics: str):
    blocks = ics.split("BEGIN:VEVENT\r\n")[1:]
    return [block.split("END:VEVENT")[0].split("\r\n") for block in blocks]


def test_parse_scope_strips_level_prefixes() -> None:
    assert parse_scope("city:austin-tx, county:travis-county-tx,,state:") == ["austin-tx", "travis-county-tx"]
    assert parse_scope("austin-tx") == ["austin-tx"]
    assert parse_scope(None) == []


def test_escape_ics_text() -> None:
    assert escape_ics_text("Budget; Audit, and\nFinance \\ Ops") == r"Budget\; Audit\, and\nFinance \\ Ops"


def test_meeting_without_end_lasts_two_hours() -> None:
    event = CalendarEvent(
        id=3,
        kind=CalendarEventKind.MEETING,
        title="Regular Council Meeting",
        starts_at=datetime(2025, 10, 9, 15, 0),
        location="Council Chambers, 301 W. 2nd St",
    )

    ics = generate_ics([event], now=STAMP)
    (vevent,) = _vevents(ics)

    assert "UID:meeting-3@localgov-watch" in vevent
    assert "DTSTAMP:20251001T120000Z" in vevent
    assert "DTSTART:20251009T150000Z" in vevent
    assert "DTEND:20251009T170000Z" in vevent
    assert "LOCATION:Council Chambers\\, 301 W. 2nd St" in vevent


def test_election_is_all_day_with_exclusive_end() -> None:
    event = CalendarEvent(
        id=9,
        kind=CalendarEventKind.ELECTION,
        title="General Election",
        starts_at=datetime(2025, 11, 4),
        all_day=True,
    )

    (vevent,) = _vevents(generate_ics([event], now=STAMP))

    assert "DTSTART;VALUE=DATE:20251104" in vevent
    assert "DTEND;VALUE=DATE:20251105" in vevent


def test_document_uses_crlf_line_endings() -> None:
    ics = generate_ics([], now=STAMP)

    assert ics.startswith("BEGIN:VCALENDAR\r\nVERSION:2.0\r\n")
    assert ics.endswith("END:VCALENDAR\r\n")
    assert "\n" not in ics.replace("\r\n", "")


def test_list_events_filters_by_jurisdiction_and_kind() -> None:
    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        seeded = await seed_calendar(database, ids)
        start, end = datetime(2025, 10, 1), datetime(2025, 12, 1)
        async with database.session() as session:
            service = CalendarService(session)
            default_scope = await service.list_events(start, end)
            both = await service.list_events(start, end, ["austin-tx", "travis-county-tx"])
            elections = await service.list_events(start, end, ["travis-county-tx"], kinds=["elections"])
            unknown = await service.list_events(start, end, ["nowhere"])
        await database.close()
        return seeded, default_scope, both, elections, unknown

    seeded, default_scope, both, elections, unknown = asyncio.run(scenario())

    assert [event.id for event in default_scope] == [seeded["council"], seeded["planning"]]
    assert default_scope[0].ends_at == datetime(2025, 10, 9, 17, 0)
    assert default_scope[0].jurisdiction_slug == "austin-tx"
    assert default_scope[0].url == f"/meetings/{seeded['council']}"

    assert [event.starts_at for event in both] == sorted(event.starts_at for event in both)
    assert len(both) == 4
    assert both[0].id == seeded["court"]

    assert len(elections) == 1
    assert elections[0].all_day is True
    assert elections[0].starts_at == datetime(2025, 11, 4)
    assert unknown == []


def test_election_on_end_day_is_included_when_end_has_a_time() -> None:
    async def scenario():
        database = await make_database()
        ids = await seed_austin(database)
        seeded = await seed_calendar(database, ids)
        start = datetime(2025, 11, 1)
        async with database.session() as session:
            service = CalendarService(session)
            evening = await service.list_events(start, datetime(2025, 11, 4, 18, 0), ["travis-county-tx"], kinds=["elections"])
            midnight = await service.list_events(start, datetime(2025, 11, 4), ["travis-county-tx"], kinds=["elections"])
        await database.close()
        return seeded, evening, midnight

    seeded, evening, midnight = asyncio.run(scenario())

    assert [event.id for event in evening] == [seeded["election"]]
    assert midnight == []
