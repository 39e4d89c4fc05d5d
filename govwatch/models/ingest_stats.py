"""
Per-run ingestion counters.

Responsibility: Accumulate counts and a bounded error list for one source run
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


MAX_RECORDED_ERRORS = 10


class RunStatus(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    DEGRADED = "degraded"
    ERROR = "error"


class IngestStats(BaseModel):
    """
    Counters for a single ingestion run.

    The error counter keeps counting past the cap; only the diagnostic
    message list is bounded.
    """
    found: int = 0
    new: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    errors: int = 0
    pdfs_processed: int = 0
    ai_tokens_used: int = 0
    error_messages: List[str] = Field(default_factory=list)
    fixture_used: bool = False
    failed: bool = Field(default=False, description="Adapter failed outright")
    max_errors: int = Field(default=MAX_RECORDED_ERRORS, exclude=True)

    def add_error(self, message: str) -> None:
        self.errors += 1
        if len(self.error_messages) < self.max_errors:
            self.error_messages.append(message)

    def resolve_status(self) -> RunStatus:
        if self.failed:
            return RunStatus.ERROR
        if self.fixture_used:
            return RunStatus.DEGRADED
        return RunStatus.SUCCESS

    def summary_line(self) -> str:
        return f"Completed: {self.new} new, {self.updated} updated, {self.errors} errors"
