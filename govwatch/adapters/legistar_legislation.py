"""
Legistar legislation adapter.

Legistar's Legislation.aspx only renders rows for some query strings, so
several URL patterns are tried until one returns a populated grid.

Responsibility: Parse Legistar legislation grid rows into LegislationRecords
"""

from datetime import datetime
from typing import Any, List, Optional, Tuple

from bs4 import Tag

from .base_adapter import BaseAdapter
from ..exceptions import GovWatchError
from ..models.adapter_models import AdapterError, AdapterResponse
from ..models.legislation import LegislationRecord, LegislationStatus
from ..parsing.keyword_tags import extract_keyword_tags
from ..utils.html import load_html
from ..utils.text import absolute_url, create_external_id, parse_day, safe_text

EMPTY_PAGE_MARKERS = ("Please enter your search criteria", "0 records")


def derive_legistar_status(status_text: str) -> LegislationStatus:
    """Map Legistar's free-text status column onto LegislationStatus"""
    status = (status_text or "").lower()
    if not status:
        return LegislationStatus.INTRODUCED
    if "adopted" in status or "approved" in status or "passed" in status:
        return LegislationStatus.PASSED
    if "final" in status or "effective" in status:
        return LegislationStatus.EFFECTIVE
    if "pending" in status or "draft" in status:
        return LegislationStatus.PENDING
    if "withdrawn" in status or "failed" in status:
        return LegislationStatus.WITHDRAWN
    return LegislationStatus.INTRODUCED


def has_legislation_grid(html: str) -> bool:
    if any(marker in html for marker in EMPTY_PAGE_MARKERS):
        return False
    return "rgMasterTable" in html


class LegistarLegislationAdapter(BaseAdapter[LegislationRecord]):
    """Adapter for Legistar legislation listings, keyed per jurisdiction"""

    source_name = "legistar_legislation"
    record_kind = "legislation"
    natural_key_scope = "jurisdiction"

    ROW_SELECTOR = "table.rgMasterTable tr.rgRow, table.rgMasterTable tr.rgAltRow"

    def candidate_urls(self) -> List[str]:
        return [
            f"{self.url}/Legislation.aspx?ShowAll=1",
            f"{self.url}/Legislation.aspx?YearId={self.now.year}",
            f"{self.url}/Legislation.aspx?View=List",
        ]

    def parse_listing(self, html: str) -> Tuple[List[LegislationRecord], List[AdapterError], int]:
        soup = load_html(html)
        return self._normalize_rows(soup.select(self.ROW_SELECTOR), self.url)

    def normalize(self, raw_data: Tag) -> Optional[LegislationRecord]:
        cells = raw_data.find_all("td")
        if len(cells) < 4:
            return None

        file_number = safe_text(cells[0].get_text())
        item_type = safe_text(cells[1].get_text())
        status_text = safe_text(cells[2].get_text())
        file_created = safe_text(cells[3].get_text())

        title = ""
        if len(cells) > 6:
            title = safe_text(cells[6].get_text())
        if not title and len(cells) > 5:
            title = safe_text(cells[5].get_text())

        if not file_number or not title:
            return None

        link = raw_data.find("a", href=True)

        return LegislationRecord(
            external_id=create_external_id([self.url, file_number]),
            title=title,
            status=derive_legistar_status(status_text),
            introduced_at=parse_day(file_created),
            doc_url=absolute_url(self.url + "/", link["href"]) if link else None,
            tags=extract_keyword_tags(f"{item_type} {title}"),
        )

    async def fetch(self, **kwargs: Any) -> AdapterResponse[LegislationRecord]:
        start_time = datetime.utcnow()
        requests_before = self.fetcher.requests_made
        errors: List[AdapterError] = []
        html: Optional[str] = None
        reachable = False
        last_error: Optional[GovWatchError] = None

        for url in self.candidate_urls():
            try:
                page = await self.fetcher.get_text(url)
            except GovWatchError as e:
                self.logger.warning(f"Legistar URL failed {url}: {e}")
                errors.append(self._row_error(e, {"url": url}, retryable=True))
                last_error = e
                continue

            reachable = True
            if has_legislation_grid(page):
                self.logger.info(f"Using legislation listing {url}")
                html = page
                break

        if not reachable and last_error is not None:
            return self._build_failure_response(last_error, start_time)

        if html is None:
            self.logger.warning(f"No Legistar URL pattern returned legislation for {self.url}")
            return self._build_success_response([], errors, start_time)

        records, row_errors, skipped = self.parse_listing(html)
        return self._build_success_response(
            records[:self.config.legislation_page_limit],
            errors + row_errors,
            start_time,
            skipped=skipped,
            requests_made=self.fetcher.requests_made - requests_before,
        )
