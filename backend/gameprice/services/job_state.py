"""In-memory state of the background scrape job exposed by the HTTP API."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from gameprice.scrapers.base import BatchReport


class ScrapeJobState:
    """Status of the current or most recent scrape job.

    Related fields are changed together under one lock, so readers never
    observe a half-updated job. Only one job may be running at a time.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self.is_running = False
        self.current_batch_id: Optional[str] = None
        self.started_at: Optional[datetime] = None
        self.finished_at: Optional[datetime] = None
        self.processed = 0
        self.total = 0
        self.last_error: Optional[str] = None
        self.last_result: Optional[BatchReport] = None
        self.failed_urls: List[Dict[str, Any]] = []

    async def try_start(self, total: int) -> bool:
        """Mark a job as running; False when one is already running."""
        async with self._lock:
            if self.is_running:
                return False
            self.is_running = True
            self.current_batch_id = None
            self.started_at = datetime.now(timezone.utc)
            self.finished_at = None
            self.processed = 0
            self.total = total
            self.last_error = None
            return True

    def update_progress(self, processed: int, total: int) -> None:
        self.processed = processed
        self.total = total

    async def finish(self, report: BatchReport) -> None:
        async with self._lock:
            self.is_running = False
            self.finished_at = datetime.now(timezone.utc)
            self.current_batch_id = report.batch_id
            self.processed = report.requested_url_count
            self.total = report.requested_url_count
            self.last_result = report
            self.failed_urls = [
                {
                    "url": outcome.url,
                    "siteName": outcome.site_domain,
                    "error": outcome.error_message,
                }
                for outcome in report.failed_outcomes
            ]

    async def fail(self, error: str) -> None:
        async with self._lock:
            self.is_running = False
            self.finished_at = datetime.now(timezone.utc)
            self.last_error = error

    def snapshot(self) -> Dict[str, Any]:
        progress = round(self.processed / self.total * 100) if self.total else 0
        return {
            "isRunning": self.is_running,
            "batchId": self.current_batch_id,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
            "processed": self.processed,
            "total": self.total,
            "progress": progress,
            "lastError": self.last_error,
            "hasResult": self.last_result is not None,
        }


_job_state: Optional[ScrapeJobState] = None


def get_job_state() -> ScrapeJobState:
    """Get the process-wide job state."""
    global _job_state
    if _job_state is None:
        _job_state = ScrapeJobState()
    return _job_state
