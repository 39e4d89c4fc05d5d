from datetime import date, datetime

from govwatch.utils.html import find_link, load_html, select_first_matching
from govwatch.utils.text import absolute_url, create_external_id, normalize_date, parse_day, safe_text


def test_safe_text_collapses_whitespace() -> None:
    assert safe_text("  City \n Council\tMeeting ") == "City Council Meeting"
    assert safe_text(None) == ""


def test_normalize_date_reads_naive_times_as_central() -> None:
    # CST is UTC-6 in January
    assert normalize_date("January 15, 2025 10:00 AM") == datetime(2025, 1, 15, 16, 0)


def test_normalize_date_respects_daylight_saving() -> None:
    # CDT is UTC-5 in July
    assert normalize_date("July 10, 2025 6:00 PM") == datetime(2025, 7, 10, 23, 0)


def test_normalize_date_keeps_explicit_offsets() -> None:
    assert normalize_date("2025-03-01T12:00:00+00:00") == datetime(2025, 3, 1, 12, 0)


def test_normalize_date_rejects_garbage() -> None:
    assert normalize_date("TBD") is None
    assert normalize_date("") is None


def test_parse_day() -> None:
    assert parse_day("11/05/2025") == date(2025, 11, 5)
    assert parse_day("not a date") is None


def test_create_external_id_slugs_parts() -> None:
    external_id = create_external_id(["austin-meeting", "Jan 15, 2025", "Regular Meeting"])

    assert external_id == "austin-meeting-jan-15-2025-regular-meeting"


def test_create_external_id_uses_iso_days_and_skips_none() -> None:
    assert create_external_id(["travis-election", date(2025, 11, 4), None, "General"]) == (
        "travis-election-2025-11-04-general"
    )


def test_create_external_id_falls_back_to_digest() -> None:
    external_id = create_external_id(["!!!", "???"])

    assert external_id
    assert external_id == create_external_id(["!!!", "???"])


def test_absolute_url() -> None:
    base = "https://www.austintexas.gov/department/city-council/"

    assert absolute_url(base, "agenda.pdf") == "https://www.austintexas.gov/department/city-council/agenda.pdf"
    assert absolute_url(base, "/edims/document.cfm?id=1") == "https://www.austintexas.gov/edims/document.cfm?id=1"
    assert absolute_url(base, "javascript:void(0)") is None
    assert absolute_url(base, None) is None


def test_select_first_matching_uses_first_selector_with_results() -> None:
    soup = load_html("<div class='item'>a</div><div class='item'>b</div><p>c</p>")

    assert [el.get_text() for el in select_first_matching(soup, [".missing", ".item", "p"])] == ["a", "b"]
    assert select_first_matching(soup, [".missing"]) == []


def test_find_link_by_text_or_href() -> None:
    soup = load_html('<a href="/docs/1.pdf">Agenda</a><a href="/minutes/2">View</a>')

    assert find_link(soup, text_keyword="agenda") == "/docs/1.pdf"
    assert find_link(soup, href_keyword="minutes") == "/minutes/2"
    assert find_link(soup, text_keyword="video") is None
