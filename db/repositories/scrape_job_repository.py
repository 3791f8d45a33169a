"""
Repository for scrape job persistence and status lookup.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.scrape_job import UNKNOWN_ORGANISER, ScrapeJob, ScrapeJobStatus


class ScrapeJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_job(
        self,
        *,
        organiser: str | None,
        event_url: str,
        started_by: str | None = None,
    ) -> ScrapeJob:
        job = ScrapeJob(
            organiser=organiser or UNKNOWN_ORGANISER,
            event_url=event_url,
            started_by=started_by,
            status=ScrapeJobStatus.PENDING,
            results_count=0,
        )
        self._session.add(job)
        self._session.flush()
        self._session.refresh(job)
        return job

    def get_job(self, job_id: uuid.UUID, *, for_update: bool = False) -> ScrapeJob | None:
        if for_update:
            stmt = select(ScrapeJob).where(ScrapeJob.id == job_id).with_for_update()
            return self._session.scalars(stmt).first()
        return self._session.get(ScrapeJob, job_id)

    def list_jobs(
        self,
        *,
        limit: int = 50,
        status: str | None = None,
    ) -> list[ScrapeJob]:
        stmt: Select[tuple[ScrapeJob]] = select(ScrapeJob)
        if status:
            stmt = stmt.where(ScrapeJob.status == status)

        stmt = stmt.order_by(ScrapeJob.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def apply(
        self,
        job: ScrapeJob,
        *,
        status: str | None = None,
        results_count: int | None = None,
        error_message: str | None = None,
    ) -> ScrapeJob:
        if status is not None:
            job.status = status
            if status in ScrapeJobStatus.TERMINAL:
                job.completed_at = datetime.now(timezone.utc)
        if results_count is not None:
            job.results_count = results_count
        if error_message is not None:
            job.error_message = error_message
        self._session.flush()
        return job
