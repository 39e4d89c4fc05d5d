"""
Base adapter interface for all government sources.

Defines the contract that all adapters (Austin, Legistar, Texas Capitol,
Travis County) must implement. Ensures consistent error handling, fixture
substitution, and response format across all sources.

Responsibility: Abstract base class defining adapter contract
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic, TypeVar, Any, List, Optional, Tuple
import logging

from ..config import IngestConfig, settings
from ..exceptions import FetchError, GovWatchError
from ..models.adapter_models import (
    AdapterResponse,
    AdapterStatus,
    AdapterError,
    AdapterMetrics,
)
from ..utils.http_client import PoliteFetcher


# Generic type for normalized record models
T = TypeVar('T')


class BaseAdapter(ABC, Generic[T]):
    """
    Abstract base class for all source adapters.

    Every adapter MUST:
    1. Implement fetch() to retrieve pages through self.fetcher
    2. Keep HTML interpretation in pure parse methods (html in, records out)
    3. Return AdapterResponse with normalized data or errors
    4. Log all operations for observability

    Subclasses should NOT:
    - Raise from fetch() (catch and return in AdapterResponse)
    - Store state between fetch() calls

    Class attributes:
        source_name: Identifier used for logging and responses
        record_kind: "legislation", "meeting" or "election"
        natural_key_scope: "source" or "jurisdiction"; the latter means the
            same external_id from any source of a jurisdiction is one record
        default_url: Listing URL used when the source row does not set one
    """

    source_name: str = "base"
    record_kind: str = "legislation"
    natural_key_scope: str = "source"
    default_url: Optional[str] = None

    def __init__(
        self,
        fetcher: PoliteFetcher,
        url: Optional[str] = None,
        ingest_config: Optional[IngestConfig] = None,
        now: Optional[datetime] = None,
    ):
        """
        Initialize base adapter.

        Args:
            fetcher: Shared polite HTTP client
            url: Listing or base URL from the source configuration
            ingest_config: Page limits and pacing (defaults to global settings)
            now: Reference time for fixtures and date windows (defaults to utcnow)
        """
        self.fetcher = fetcher
        self.url = (url or self.default_url or "").rstrip("/")
        self.config = ingest_config or settings.ingest
        self._now = now

        self.logger = logging.getLogger(f"adapter.{self.source_name}")

    @property
    def now(self) -> datetime:
        return self._now or datetime.utcnow()

    @abstractmethod
    async def fetch(self, **kwargs: Any) -> AdapterResponse[T]:
        """
        Fetch records from the source.

        Returns:
            AdapterResponse containing normalized records, errors, and metrics
        """
        pass

    @abstractmethod
    def normalize(self, raw_data: Any) -> Optional[T]:
        """
        Normalize one scraped row into a record.

        Returns:
            Record instance, or None when the row should be skipped
            (header rows, rows without a parseable date)

        Raises:
            ValueError: If the row is malformed (recorded by the caller)
        """
        pass

    def fixture_records(self) -> List[T]:
        """Sample records substituted when a listing yields nothing"""
        return []

    def _normalize_rows(self, rows: List[Any], context: str) -> Tuple[List[T], List[AdapterError], int]:
        """
        Normalize rows one by one, recording per-row failures.

        Returns:
            (records, errors, skipped_count)
        """
        records: List[T] = []
        errors: List[AdapterError] = []
        skipped = 0

        for index, row in enumerate(rows):
            try:
                record = self.normalize(row)
            except (ValueError, TypeError, AttributeError, KeyError) as e:
                self.logger.warning(f"Failed to parse row {index} of {context}: {e}")
                errors.append(self._row_error(e, {"url": context, "row": index}))
                continue

            if record is None:
                skipped += 1
                continue
            records.append(record)

        return records, errors, skipped

    def _row_error(self, error: Exception, context: dict, retryable: bool = False) -> AdapterError:
        return AdapterError(
            timestamp=datetime.utcnow(),
            error_type=type(error).__name__,
            message=str(error),
            context={"adapter": self.source_name, **context},
            retryable=retryable,
        )

    def _build_success_response(
        self,
        data: List[T],
        errors: List[AdapterError],
        start_time: datetime,
        skipped: int = 0,
        requests_made: int = 0,
    ) -> AdapterResponse[T]:
        """
        Build a successful AdapterResponse.

        Substitutes fixture records when nothing was found and fixtures are
        allowed; the response is then marked DEGRADED.
        """
        used_fixture = False
        if not data and self.config.allow_fixtures:
            fixtures = self.fixture_records()
            if fixtures:
                self.logger.warning(f"No records found, using {len(fixtures)} sample records")
                data = fixtures
                used_fixture = True

        end_time = datetime.utcnow()
        duration = (end_time - start_time).total_seconds()

        if used_fixture:
            status = AdapterStatus.DEGRADED
        elif not errors:
            status = AdapterStatus.SUCCESS
        else:
            status = AdapterStatus.PARTIAL_SUCCESS

        return AdapterResponse(
            status=status,
            data=data,
            errors=errors,
            metrics=AdapterMetrics(
                records_attempted=len(data) + len(errors) + skipped,
                records_succeeded=len(data),
                records_failed=len(errors),
                records_skipped=skipped,
                duration_seconds=duration,
                requests_made=requests_made,
            ),
            source=self.source_name,
            fetch_timestamp=end_time,
            used_fixture=used_fixture,
        )

    def _build_failure_response(
        self,
        error: Exception,
        start_time: datetime,
    ) -> AdapterResponse[T]:
        """
        Build a failed AdapterResponse.

        Used when the entire fetch fails (listing unreachable, robots.txt
        disallow). Network failures are marked retryable.
        """
        end_time = datetime.utcnow()
        duration = (end_time - start_time).total_seconds()
        retryable = isinstance(error, FetchError)

        return AdapterResponse(
            status=AdapterStatus.SOURCE_UNAVAILABLE if retryable else AdapterStatus.FAILURE,
            data=None,
            errors=[self._row_error(error, {"url": self.url}, retryable=retryable)],
            metrics=AdapterMetrics(
                records_attempted=0,
                records_succeeded=0,
                records_failed=0,
                duration_seconds=duration,
            ),
            source=self.source_name,
            fetch_timestamp=end_time,
        )


class ListingAdapter(BaseAdapter[T]):
    """
    Adapter for sources that publish everything on a single listing page.

    Subclasses implement parse_listing(); fetch() downloads the page, parses
    it, applies the record limit, and builds the response.
    """

    @property
    def record_limit(self) -> Optional[int]:
        return None

    @abstractmethod
    def parse_listing(self, html: str) -> Tuple[List[T], List[AdapterError], int]:
        """Parse listing HTML into (records, errors, skipped_count)"""
        pass

    async def fetch(self, **kwargs: Any) -> AdapterResponse[T]:
        start_time = datetime.utcnow()
        requests_before = self.fetcher.requests_made
        self.logger.info(f"Fetching listing {self.url}")

        try:
            html = await self.fetcher.get_text(self.url)
        except GovWatchError as e:
            self.logger.error(f"Failed to fetch {self.url}: {e}")
            return self._build_failure_response(e, start_time)

        records, errors, skipped = self.parse_listing(html)
        if self.record_limit is not None:
            records = records[:self.record_limit]

        self.logger.info(f"Parsed {len(records)} records ({skipped} skipped, {len(errors)} errors)")
        return self._build_success_response(
            records,
            errors,
            start_time,
            skipped=skipped,
            requests_made=self.fetcher.requests_made - requests_before,
        )
