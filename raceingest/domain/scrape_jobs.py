"""
raceingest/domain/scrape_jobs.py

Domain models for scrape-job orchestration.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from db.models.scrape_job import ScrapeJobStatus
from raceingest.errors import InvalidJobTransition, ScrapeJobError


@dataclass(frozen=True)
class ScrapeJobRequest:
    """
    One submission: ingest the event at `event_url`.
    """

    event_url: str
    organiser: str | None = None
    started_by: str | None = None


@dataclass(frozen=True)
class Job:
    """
    Read-only snapshot of a scrape job record.
    """

    id: uuid.UUID
    organiser: str
    event_url: str
    status: str
    started_by: str | None = None
    results_count: int = 0
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in ScrapeJobStatus.TERMINAL


@dataclass(frozen=True)
class JobPatch:
    """
    Requested change to a job record.
    """

    status: str | None = None
    results_count: int | None = None
    error_message: str | None = None

    def check(self, current_status: str) -> None:
        """
        Raise InvalidJobTransition unless this patch may be applied to a job
        currently in `current_status`.
        """

        if current_status in ScrapeJobStatus.TERMINAL:
            raise InvalidJobTransition(
                f"Job is {current_status} and can no longer change."
            )
        if self.error_message is not None and self.status != ScrapeJobStatus.FAILED:
            raise InvalidJobTransition("error_message can only be set together with status=failed.")
        if self.results_count is not None and self.status != ScrapeJobStatus.COMPLETED:
            raise InvalidJobTransition(
                "results_count can only be set together with status=completed."
            )
        if self.status is None:
            return

        allowed_from = ScrapeJobStatus.PREDECESSORS.get(self.status)
        if allowed_from is None:
            raise InvalidJobTransition(f"Unknown target status '{self.status}'.")
        if current_status not in allowed_from:
            raise InvalidJobTransition(
                f"Cannot move job from {current_status} to {self.status}."
            )
        if self.status == ScrapeJobStatus.FAILED and not self.error_message:
            raise InvalidJobTransition("A failed job needs a non-empty error_message.")


@dataclass(frozen=True)
class StoredEvent:
    """
    Persisted event as seen by the dedup lookup.
    """

    id: uuid.UUID
    organiser: str
    event_name: str
    event_url: str
    event_date: date | None = None
    distance: str | None = None
    location: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SavedEvent:
    """
    Outcome of an insert-or-reuse event write.

    `created` is False when another pipeline persisted the same URL first.
    """

    event_id: uuid.UUID
    created: bool


@dataclass(frozen=True)
class ScrapeJobResult:
    """
    Successful scrape job outcome returned to the caller.
    """

    job: Job
    event_id: uuid.UUID
    results_count: int


@dataclass(frozen=True)
class ScrapeJobOutcome:
    """
    Per-request outcome of a concurrent batch run.
    """

    request: ScrapeJobRequest
    result: ScrapeJobResult | None = None
    error: ScrapeJobError | None = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None
