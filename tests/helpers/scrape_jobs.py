"""
In-memory collaborators for scrape-job tests.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock

import requests

from db.models.scrape_job import ScrapeJobStatus
from raceingest.config import ScrapeJobSettings
from raceingest.domain import Job, JobPatch, SavedEvent, StoredEvent
from raceingest.errors import JobNotFound
from raceingest.scraping.base import ScraperCapability
from raceingest.scraping.connectivity import ConnectivityProbe
from raceingest.scraping.storage import EventStore, JobStore
from raceingest.scraping.types import ScrapedData, ScrapedEvent, ScrapedResult

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


class FakeResponse:
    def __init__(
        self,
        *,
        text: str = "",
        status_code: int = 200,
        json_data: Any = None,
        headers: dict[str, str] | None = None,
        url: str = "",
    ) -> None:
        self.text = text
        self.status_code = status_code
        self.headers = headers or {"Content-Type": "text/html"}
        self.url = url
        self._json = json_data

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("Response body is not JSON")
        return self._json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)


# ---------------------------------------------------------------------------
# In-memory stores
# ---------------------------------------------------------------------------


class InMemoryJobStore(JobStore):
    """Job store that also records every status a job has passed through."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._jobs: dict[uuid.UUID, Job] = {}
        self.history: dict[uuid.UUID, list[str]] = {}
        self.fail_on_status: str | None = None

    def create(self, organiser: str, event_url: str, started_by: str | None = None) -> Job:
        now = datetime.now(timezone.utc)
        job = Job(
            id=uuid.uuid4(),
            organiser=organiser,
            event_url=event_url,
            status=ScrapeJobStatus.PENDING,
            started_by=started_by,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._jobs[job.id] = job
            self.history[job.id] = [job.status]
        return job

    def update(self, job_id: uuid.UUID, patch: JobPatch) -> Job:
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                raise JobNotFound(job_id)
            patch.check(current.status)
            if patch.status is not None and patch.status == self.fail_on_status:
                raise RuntimeError("database is gone")

            changes: dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
            if patch.status is not None:
                changes["status"] = patch.status
            if patch.results_count is not None:
                changes["results_count"] = patch.results_count
            if patch.error_message is not None:
                changes["error_message"] = patch.error_message
            updated = Job(**{**current.__dict__, **changes})
            self._jobs[job_id] = updated
            if patch.status is not None:
                self.history[job_id].append(patch.status)
            return updated

    def get(self, job_id: uuid.UUID) -> Job | None:
        with self._lock:
            return self._jobs.get(job_id)

    def list_recent(self, *, limit: int = 50, status: str | None = None) -> list[Job]:
        with self._lock:
            jobs = [job for job in self._jobs.values() if status is None or job.status == status]
        return sorted(jobs, key=lambda job: job.created_at, reverse=True)[:limit]

    def only(self) -> Job:
        with self._lock:
            assert len(self._jobs) == 1
            return next(iter(self._jobs.values()))


class InMemoryEventStore(EventStore):
    """Event store whose save_event is atomic per URL, like a unique constraint."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.events: dict[str, StoredEvent] = {}
        self.results: dict[uuid.UUID, list[tuple[ScrapedResult, str]]] = {}
        self.save_results_calls = 0
        self.fail_save_results = False

    def find_by_url(self, event_url: str) -> StoredEvent | None:
        with self._lock:
            return self.events.get(event_url)

    def save_event(self, event: ScrapedEvent) -> SavedEvent:
        with self._lock:
            existing = self.events.get(event.event_url)
            if existing is not None:
                return SavedEvent(event_id=existing.id, created=False)
            stored = StoredEvent(
                id=uuid.uuid4(),
                organiser=event.organiser,
                event_name=event.event_name,
                event_url=event.event_url,
                event_date=event.event_date,
                distance=event.distance,
                location=event.location,
                metadata=dict(event.metadata),
            )
            self.events[event.event_url] = stored
            return SavedEvent(event_id=stored.id, created=True)

    def save_results(
        self,
        event_id: uuid.UUID,
        results: Sequence[ScrapedResult],
        distance: str,
    ) -> int:
        with self._lock:
            self.save_results_calls += 1
            if self.fail_save_results:
                raise ConnectionError("results table unavailable")
            rows = [(result, distance) for result in results if result.name.strip()]
            self.results.setdefault(event_id, []).extend(rows)
            return len(rows)


# ---------------------------------------------------------------------------
# Capabilities and probe
# ---------------------------------------------------------------------------


def sample_results(count: int) -> list[ScrapedResult]:
    return [
        ScrapedResult(name=f"Runner {index}", position=index, finish_time=f"01:{index:02d}:00")
        for index in range(1, count + 1)
    ]


class ScriptedCapability(ScraperCapability):
    """Capability returning canned data and counting invocations."""

    organiser = "AcmeRace"
    url_patterns = (r"^https://acme\.example/",)

    def __init__(
        self,
        *,
        results: list[ScrapedResult] | None = None,
        distance: str | None = "Half Marathon",
        error: Exception | None = None,
        before_return: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(session=MagicMock(spec=requests.Session), settings=ScrapeJobSettings())
        self.results = sample_results(3) if results is None else results
        self.distance = distance
        self.error = error
        self.before_return = before_return
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def scrape_event(self, url: str) -> ScrapedData:
        with self._lock:
            self.calls.append(url)
        if self.error is not None:
            raise self.error
        if self.before_return is not None:
            self.before_return()
        return ScrapedData(
            event=ScrapedEvent(
                organiser=self.organiser,
                event_name="Acme City Run 2024",
                event_url=url,
                distance=self.distance,
            ),
            results=list(self.results),
        )


class ScriptedProbe(ConnectivityProbe):
    def __init__(self, reachable: bool = True) -> None:
        super().__init__(session=MagicMock(spec=requests.Session))
        self.reachable = reachable
        self.calls: list[tuple[str, float]] = []

    def check(self, url: str, timeout: float = 5.0) -> bool:
        self.calls.append((url, timeout))
        return self.reachable

