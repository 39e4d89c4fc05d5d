"""
Local Gov Watch ingestion service.

Scrapes legislation, meetings, and elections from municipal, county, and
state sites, stores them idempotently, and derives calendar exports,
tracked-term alerts, topic trends, and digests.
"""

__version__ = "1.0.0"
