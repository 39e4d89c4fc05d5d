from govwatch.models.legislation import LegislationStatus
from govwatch.parsing.agenda_extractor import (
    clean_title,
    extract_legislation_from_agenda,
    is_valid_title,
)

AGENDA_TEXT = """
CITY COUNCIL REGULAR MEETING AGENDA
Item 12. Ordinance No. 2025-014: Amending City Code Chapter 25-2 relating to residential zoning
Sponsor: Zo Qadri (District 9)
Item 13. Approve Resolution No. 2025-31 - Adopting the affordable housing investment plan for fiscal year 2026
Public hearing scheduled for November 6.
Item 14. Ordinance No. 2025-014: Amending City Code Chapter 25-2 relating to residential zoning
"""


def test_extracts_ordinances_and_resolutions_once() -> None:
    items = extract_legislation_from_agenda(AGENDA_TEXT)

    assert [(item.type, item.number) for item in items] == [
        ("ordinance", "2025-014"),
        ("resolution", "2025-31"),
    ]
    assert items[0].title == "Amending City Code Chapter 25-2 relating to residential zoning"


def test_extracts_author_near_match() -> None:
    items = extract_legislation_from_agenda(AGENDA_TEXT)

    assert items[0].author == "Zo Qadri"


def test_status_comes_from_nearby_keywords() -> None:
    text = "Ordinance No. 2025-020: Establishing new parkland dedication fees for developers\nAdopted 7-0."

    items = extract_legislation_from_agenda(text)

    assert items[0].status == "passed"


def test_to_record_keys_per_jurisdiction() -> None:
    item = extract_legislation_from_agenda(AGENDA_TEXT)[1]

    record = item.to_record("austin-tx", doc_url="https://example.gov/agenda.pdf")

    assert record.external_id == "austin-tx-resolution-2025-31"
    assert record.status == LegislationStatus.PENDING
    assert record.doc_url == "https://example.gov/agenda.pdf"
    assert "housing" in record.tags


def test_rejects_short_and_long_titles() -> None:
    assert not is_valid_title("Budget item")
    assert not is_valid_title("A" * 19)
    assert is_valid_title("Amending the city budget for parks")
    assert not is_valid_title("Amending the budget " * 11)


def test_rejects_spanish_boilerplate() -> None:
    assert not is_valid_title("Los miembros del público también pueden hablar")

    text = "Resolución Resolution No. 2025-40: los miembros del público también pueden comentar por escrito"
    assert extract_legislation_from_agenda(text) == []


def test_rejects_titles_starting_with_stopwords() -> None:
    assert not is_valid_title("with the amount of forty thousand dollars")


def test_rejects_mostly_numeric_titles() -> None:
    assert not is_valid_title("2025-001 2025-002 2025-003 ab")


def test_clean_title_strips_prefixes_and_noise() -> None:
    assert clean_title("  An Ordinance  to amend the noise code;  ") == "Amend the noise code"
    assert clean_title("Page 3 of 10 Zoning changes for East Riverside") == "Zoning changes for East Riverside"


def test_empty_text() -> None:
    assert extract_legislation_from_agenda("") == []
    assert extract_legislation_from_agenda(None) == []
