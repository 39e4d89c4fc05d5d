"""
Legistar calendar meetings adapter.

Legistar (Granicus) hosts meeting calendars for many counties and cities.
The month view of Calendar.aspx is walked one month at a time from a
configured start date to a few months ahead.

Responsibility: Parse Legistar calendar rows into MeetingRecords
"""

import asyncio
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Iterator, List, Optional, Tuple

from bs4 import Tag

from .base_adapter import BaseAdapter
from ..exceptions import GovWatchError
from ..models.adapter_models import AdapterError, AdapterResponse
from ..models.meeting import MeetingRecord
from ..utils.html import find_link, load_html
from ..utils.text import absolute_url, create_external_id, normalize_date, safe_text


def iter_months(start: date, end: date) -> Iterator[Tuple[int, int]]:
    """Yield (year, month) pairs from start's month through end's month"""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1


def add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1)


class LegistarMeetingsAdapter(BaseAdapter[MeetingRecord]):
    """
    Adapter for Legistar meeting calendars.

    The source URL is the Legistar site root, e.g.
    "https://sonoma-county.legistar.com".
    """

    source_name = "legistar_meetings"
    record_kind = "meeting"

    ROW_SELECTOR = "table.rgMasterTable tr, tr.rgRow, tr.rgAltRow"

    def __init__(self, *args, sleep: Optional[Callable[[float], Awaitable[None]]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._sleep = sleep or asyncio.sleep

    def month_url(self, year: int, month: int) -> str:
        return f"{self.url}/Calendar.aspx?View=Month&Year={year}&Month={month}"

    def parse_month(self, html: str, page_url: str) -> Tuple[List[MeetingRecord], List[AdapterError], int]:
        soup = load_html(html)
        # First matched row is the grid header
        rows = soup.select(self.ROW_SELECTOR)[1:]
        return self._normalize_rows(rows, page_url)

    def normalize(self, raw_data: Tag) -> Optional[MeetingRecord]:
        cells = raw_data.find_all("td")
        if len(cells) < 3:
            return None

        body_name = safe_text(cells[0].get_text()) or "Board Meeting"
        date_text = safe_text(cells[1].get_text())
        time_text = safe_text(cells[2].get_text())
        location = safe_text(cells[3].get_text()) if len(cells) > 3 else ""

        starts_at = normalize_date(f"{date_text} {time_text}")
        if starts_at is None:
            return None

        agenda_link = raw_data.select_one('a[href*="Agenda"], a[href*="AgendaQuick"]')
        details_href = find_link(raw_data, text_keyword="details")
        minutes_href = find_link(raw_data, text_keyword="minutes", href_keyword="minutes")

        return MeetingRecord(
            external_id=create_external_id([self.url, body_name, date_text]),
            title=body_name,
            body_name=body_name,
            starts_at=starts_at,
            location=location or None,
            agenda_url=absolute_url(self.url + "/", agenda_link["href"]) if agenda_link else None,
            minutes_url=absolute_url(self.url + "/", minutes_href),
            source_detail_url=absolute_url(self.url + "/", details_href),
        )

    async def fetch(self, **kwargs: Any) -> AdapterResponse[MeetingRecord]:
        """
        Fetch meetings month by month.

        A month that fails to load is recorded and skipped; the walk continues.
        """
        start_time = datetime.utcnow()
        requests_before = self.fetcher.requests_made
        end_day = add_months(self.now.date(), self.config.legistar_months_ahead)
        months = list(iter_months(self.config.legistar_start_date, end_day))

        self.logger.info(f"Fetching {len(months)} months of meetings from {self.url}")

        records: List[MeetingRecord] = []
        errors: List[AdapterError] = []
        skipped = 0

        for index, (year, month) in enumerate(months):
            page_url = self.month_url(year, month)
            try:
                html = await self.fetcher.get_text(page_url)
            except GovWatchError as e:
                self.logger.error(f"Error fetching {year}-{month:02d}: {e}")
                errors.append(self._row_error(e, {"url": page_url}, retryable=True))
                continue

            month_records, month_errors, month_skipped = self.parse_month(html, page_url)
            self.logger.info(f"Found {len(month_records)} meetings for {year}-{month:02d}")
            records.extend(month_records)
            errors.extend(month_errors)
            skipped += month_skipped

            if index < len(months) - 1:
                await self._sleep(self.config.legistar_month_pause_seconds)

        return self._build_success_response(
            records[:self.config.legistar_meetings_limit],
            errors,
            start_time,
            skipped=skipped,
            requests_made=self.fetcher.requests_made - requests_before,
        )
