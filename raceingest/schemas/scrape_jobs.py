"""
Schemas for scrape-job run and status output.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from raceingest.domain import Job, ScrapeJobOutcome


class ScrapeJobStatusResponse(BaseModel):
    job_id: UUID
    organiser: str
    event_url: str
    status: str
    started_by: str | None = None
    results_count: int = 0
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_job(cls, job: Job) -> ScrapeJobStatusResponse:
        return cls(
            job_id=job.id,
            organiser=job.organiser,
            event_url=job.event_url,
            status=job.status,
            started_by=job.started_by,
            results_count=job.results_count,
            error_message=job.error_message,
            created_at=job.created_at,
            updated_at=job.updated_at,
            completed_at=job.completed_at,
        )


class ScrapeJobOutcomeResponse(BaseModel):
    event_url: str
    succeeded: bool
    job_id: UUID | None = None
    event_id: UUID | None = None
    results_count: int = 0
    error_kind: str | None = None
    error: str | None = None

    @classmethod
    def from_outcome(cls, outcome: ScrapeJobOutcome) -> ScrapeJobOutcomeResponse:
        if outcome.result is not None:
            return cls(
                event_url=outcome.request.event_url,
                succeeded=True,
                job_id=outcome.result.job.id,
                event_id=outcome.result.event_id,
                results_count=outcome.result.results_count,
            )
        error = outcome.error
        return cls(
            event_url=outcome.request.event_url,
            succeeded=False,
            job_id=error.job_id if error is not None else None,
            error_kind=type(error).__name__ if error is not None else None,
            error=str(error) if error is not None else None,
        )


class ScrapeJobStatusListResponse(BaseModel):
    jobs: list[ScrapeJobStatusResponse] = Field(default_factory=list)
