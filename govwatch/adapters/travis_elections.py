"""
Travis County elections adapter.

Responsibility: Parse the County Clerk's election calendar into ElectionRecords
"""

from datetime import date, timedelta
from typing import List, Optional, Tuple

from bs4 import Tag

from .base_adapter import ListingAdapter
from ..models.adapter_models import AdapterError
from ..models.election import ElectionKind, ElectionRecord
from ..utils.html import first_text, load_html
from ..utils.text import absolute_url, create_external_id, parse_day

MIN_NAME_LENGTH = 5
REGISTRATION_LEAD_DAYS = 30


def derive_election_kind(name: str) -> ElectionKind:
    """Later rules win: a "special runoff" is special"""
    lower = name.lower()
    kind = ElectionKind.GENERAL
    if "primary" in lower:
        kind = ElectionKind.PRIMARY
    if "runoff" in lower:
        kind = ElectionKind.RUNOFF
    if "special" in lower:
        kind = ElectionKind.SPECIAL
    return kind


def next_general_election_day(today: date) -> date:
    candidate = date(today.year, 11, 5)
    if candidate < today:
        candidate = date(today.year + 1, 11, 5)
    return candidate


class TravisElectionsAdapter(ListingAdapter[ElectionRecord]):
    """Adapter for Travis County Clerk election dates"""

    source_name = "travis_elections"
    record_kind = "election"
    default_url = "https://www.traviscountyclerk.org/eclerk/Content.do?code=E.3"

    ENTRY_SELECTOR = ".election-item, .calendar-entry, tr"

    def parse_listing(self, html: str) -> Tuple[List[ElectionRecord], List[AdapterError], int]:
        soup = load_html(html)
        return self._normalize_rows(soup.select(self.ENTRY_SELECTOR), self.url)

    def normalize(self, raw_data: Tag) -> Optional[ElectionRecord]:
        name = first_text(raw_data, ".election-name, .name, td:first-child")
        if len(name) < MIN_NAME_LENGTH:
            return None

        election_day = parse_day(first_text(raw_data, ".election-date, .date, td:nth-child(2)"))
        if election_day is None:
            return None

        link = raw_data.find("a", href=True)

        return ElectionRecord(
            external_id=create_external_id(["travis-election", election_day, name]),
            name=name,
            kind=derive_election_kind(name),
            date=election_day,
            registration_deadline=parse_day(first_text(raw_data, ".deadline, td:nth-child(3)")),
            info_url=absolute_url(self.url, link["href"]) if link else self.url,
        )

    def fixture_records(self) -> List[ElectionRecord]:
        election_day = next_general_election_day(self.now.date())
        return [ElectionRecord(
            external_id=create_external_id(["travis-election", election_day, "General Election"]),
            name="General Election",
            kind=ElectionKind.GENERAL,
            date=election_day,
            registration_deadline=election_day - timedelta(days=REGISTRATION_LEAD_DAYS),
            info_url=self.url,
        )]
