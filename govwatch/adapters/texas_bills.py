"""
Texas Legislature bills adapter.

Scrapes Texas Legislature Online (capitol.texas.gov). When the listing page
has no recognizable rows, a handful of well-known bill history pages are
fetched individually instead.

Responsibility: Parse Texas bill listings and history pages into LegislationRecords
"""

from datetime import datetime
from typing import Any, List, Optional, Tuple

from bs4 import Tag

from .base_adapter import BaseAdapter
from ..exceptions import GovWatchError
from ..models.adapter_models import AdapterError, AdapterResponse
from ..models.legislation import LegislationRecord, LegislationStatus
from ..parsing.keyword_tags import extract_keyword_tags
from ..utils.html import first_text, load_html
from ..utils.text import safe_text

CAPITOL_ROOT = "https://capitol.texas.gov"
FALLBACK_BILLS = ["HB1", "HB2", "HB3", "HB4", "HB5", "SB1", "SB2", "SB3", "SB4", "SB5"]
FALLBACK_SESSION = "88R"

TEXAS_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml",
}


def derive_bill_status(last_action: str) -> LegislationStatus:
    action = (last_action or "").lower()
    if "passed" in action or "enacted" in action or "signed" in action:
        return LegislationStatus.PASSED
    if "filed" in action or "introduced" in action:
        return LegislationStatus.INTRODUCED
    if "committee" in action or "referred" in action:
        return LegislationStatus.IN_COMMITTEE
    if "failed" in action or "vetoed" in action:
        return LegislationStatus.FAILED
    return LegislationStatus.INTRODUCED


class TexasBillsAdapter(BaseAdapter[LegislationRecord]):
    """Adapter for Texas state bills, keyed per jurisdiction"""

    source_name = "texas_bills"
    record_kind = "legislation"
    natural_key_scope = "jurisdiction"
    default_url = f"{CAPITOL_ROOT}/BillLookup/BillNumber.aspx"

    ROW_SELECTORS = ["#results table tr", ".bill-row", "table.bills tr"]

    def history_url(self, bill_number: str) -> str:
        return f"{CAPITOL_ROOT}/BillLookup/History.aspx?LegSess={FALLBACK_SESSION}&Bill={bill_number}"

    def find_rows(self, html: str) -> List[Tag]:
        soup = load_html(html)
        for selector in self.ROW_SELECTORS:
            rows = soup.select(selector)
            if rows:
                # Skip the header row and respect the page limit
                return rows[1:self.config.bills_page_limit * 10]
        return []

    def normalize(self, raw_data: Tag) -> Optional[LegislationRecord]:
        cells = raw_data.find_all("td")
        if len(cells) < 2:
            return None

        bill_number = safe_text(cells[0].get_text())
        title = safe_text(cells[1].get_text())
        last_action = safe_text(cells[2].get_text()) if len(cells) > 2 else ""
        if not bill_number or not title:
            return None

        link = raw_data.find("a", href=True)
        href = link["href"] if link else None
        if href and href.startswith("http"):
            doc_url = href
        elif href:
            doc_url = f"{CAPITOL_ROOT}{href if href.startswith('/') else '/' + href}"
        else:
            doc_url = self.url

        return LegislationRecord(
            external_id=bill_number,
            title=title,
            status=derive_bill_status(last_action),
            doc_url=doc_url,
            tags=extract_keyword_tags(f"{title} {last_action}"),
        )

    def parse_history(self, html: str, bill_number: str) -> Optional[LegislationRecord]:
        """Parse a single bill's history page"""
        soup = load_html(html)
        title = first_text(soup, ".bill-title, h2")
        if not title:
            return None

        action_rows = soup.select(".actions tr")
        last_action = safe_text(" ".join(td.get_text() for td in action_rows[-1].find_all("td"))) if action_rows else ""

        return LegislationRecord(
            external_id=bill_number,
            title=title,
            status=derive_bill_status(last_action),
            doc_url=self.history_url(bill_number),
            tags=extract_keyword_tags(title),
        )

    async def _fetch_fallback(self) -> Tuple[List[LegislationRecord], List[AdapterError]]:
        records: List[LegislationRecord] = []
        errors: List[AdapterError] = []

        for bill_number in FALLBACK_BILLS:
            url = self.history_url(bill_number)
            try:
                html = await self.fetcher.get_text(url, headers=TEXAS_HEADERS)
            except GovWatchError as e:
                self.logger.error(f"Error fetching fallback bill {bill_number}: {e}")
                errors.append(self._row_error(e, {"url": url, "bill": bill_number}, retryable=True))
                continue

            record = self.parse_history(html, bill_number)
            if record:
                records.append(record)

        return records, errors

    async def fetch(self, **kwargs: Any) -> AdapterResponse[LegislationRecord]:
        start_time = datetime.utcnow()
        requests_before = self.fetcher.requests_made

        try:
            html = await self.fetcher.get_text(self.url, headers=TEXAS_HEADERS)
        except GovWatchError as e:
            self.logger.error(f"Failed to fetch bills listing: {e}")
            return self._build_failure_response(e, start_time)

        rows = self.find_rows(html)
        if rows:
            records, errors, skipped = self._normalize_rows(rows, self.url)
        else:
            self.logger.info("No bill rows on listing page, trying history pages")
            records, errors = await self._fetch_fallback()
            skipped = 0

        return self._build_success_response(
            records,
            errors,
            start_time,
            skipped=skipped,
            requests_made=self.fetcher.requests_made - requests_before,
        )
