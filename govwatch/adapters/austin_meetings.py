"""
Austin City Council meetings adapter.

Scrapes the council meeting info center listing.

Responsibility: Parse Austin council meeting entries into MeetingRecords
"""

from datetime import datetime, time, timedelta
from typing import List, Optional, Tuple

from bs4 import Tag
from dateutil import tz

from .base_adapter import ListingAdapter
from ..models.adapter_models import AdapterError
from ..models.meeting import MeetingRecord
from ..utils.html import find_link, first_text, load_html
from ..utils.text import DEFAULT_TIMEZONE, absolute_url, create_external_id, normalize_date


class AustinMeetingsAdapter(ListingAdapter[MeetingRecord]):
    """
    Adapter for Austin City Council meetings.

    Example:
        adapter = AustinMeetingsAdapter(fetcher)
        response = await adapter.fetch()
    """

    source_name = "austin_council_meetings"
    record_kind = "meeting"
    default_url = "https://www.austintexas.gov/department/city-council/council/council_meeting_info_center.htm"

    ENTRY_SELECTOR = ".meeting-entry, .council-meeting"
    DEFAULT_LOCATION = "Austin City Hall"
    BODY_NAME = "City Council"

    @property
    def record_limit(self) -> int:
        return self.config.meetings_page_limit * 5

    def parse_listing(self, html: str) -> Tuple[List[MeetingRecord], List[AdapterError], int]:
        soup = load_html(html)
        return self._normalize_rows(soup.select(self.ENTRY_SELECTOR), self.url)

    def normalize(self, raw_data: Tag) -> Optional[MeetingRecord]:
        title = first_text(raw_data, ".meeting-title, h3, h4") or "City Council Meeting"
        date_text = first_text(raw_data, ".meeting-date, .date")
        time_text = first_text(raw_data, ".meeting-time, .time")
        location = first_text(raw_data, ".meeting-location, .location")

        starts_at = normalize_date(f"{date_text} {time_text}")
        if starts_at is None:
            return None

        return MeetingRecord(
            external_id=create_external_id(["austin-meeting", date_text, title]),
            title=title,
            body_name=self.BODY_NAME,
            starts_at=starts_at,
            location=location or self.DEFAULT_LOCATION,
            agenda_url=absolute_url(self.url, find_link(raw_data, "agenda", "agenda")),
            minutes_url=absolute_url(self.url, find_link(raw_data, "minutes", "minutes")),
        )

    def fixture_records(self) -> List[MeetingRecord]:
        # Local 10:00 a week out, so repeated runs on the same day agree
        local_day = self.now.replace(tzinfo=tz.UTC).astimezone(tz.gettz(DEFAULT_TIMEZONE)).date()
        meeting_day = local_day + timedelta(days=7)
        local_start = datetime.combine(meeting_day, time(10, 0), tzinfo=tz.gettz(DEFAULT_TIMEZONE))
        starts_at = local_start.astimezone(tz.UTC).replace(tzinfo=None)

        return [MeetingRecord(
            external_id=create_external_id(["austin-meeting", meeting_day, "Regular Council Meeting"]),
            title="Regular Council Meeting",
            body_name=self.BODY_NAME,
            starts_at=starts_at,
            location="Austin City Hall, 301 W 2nd St",
            agenda_url="https://www.austintexas.gov/edims/pio/document.cfm?id=123456",
        )]
