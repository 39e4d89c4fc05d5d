"""
Exception hierarchy for the ingestion pipeline.

Responsibility: Typed errors raised by fetchers, parsers, and run orchestration
"""

from typing import Optional


class GovWatchError(Exception):
    """Base class for all Local Gov Watch errors"""


class FetchError(GovWatchError):
    """Raised when a URL could not be fetched after all retry attempts"""

    def __init__(self, url: str, message: str, last_exception: Optional[BaseException] = None):
        super().__init__(f"{message}: {url}")
        self.url = url
        self.last_exception = last_exception


class RobotsDisallowedError(GovWatchError):
    """Raised when robots.txt forbids fetching a URL"""

    def __init__(self, url: str):
        super().__init__(f"Disallowed by robots.txt: {url}")
        self.url = url


class ParseError(GovWatchError):
    """Raised when a fetched page cannot be interpreted"""


class SourceNotFoundError(GovWatchError):
    """Raised when a source id does not exist"""


class SourceDisabledError(GovWatchError):
    """Raised when attempting to run a disabled source"""


class UnknownParserError(GovWatchError):
    """Raised when a source references a parser key with no adapter"""


class NotificationError(GovWatchError):
    """Raised when the email API rejects or cannot receive a message"""
