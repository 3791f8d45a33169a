"""
SQLAlchemy-backed job and event stores.

Each operation runs in its own short session and transaction so that every
write is committed before the call returns and stores can be shared by
concurrently running pipelines.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from db.models.event import Event
from db.models.scrape_job import ScrapeJob
from db.repositories import EventRepository, ScrapeJobRepository, normalize_name
from raceingest.domain import Job, JobPatch, SavedEvent, StoredEvent
from raceingest.errors import JobNotFound
from raceingest.scraping.logging_utils import log_event
from raceingest.scraping.storage.base import EventStore, JobStore
from raceingest.scraping.types import ScrapedEvent, ScrapedResult

logger = logging.getLogger(__name__)


class SQLAlchemyJobStore(JobStore):
    """
    Job store whose transitions are serialised by a row lock on the job.
    """

    def __init__(self, *, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def create(
        self,
        organiser: str,
        event_url: str,
        started_by: str | None = None,
    ) -> Job:
        with self._session_factory() as session, session.begin():
            job = ScrapeJobRepository(session).create_job(
                organiser=organiser,
                event_url=event_url,
                started_by=started_by,
            )
            return _to_job(job)

    def update(self, job_id: uuid.UUID, patch: JobPatch) -> Job:
        with self._session_factory() as session, session.begin():
            repository = ScrapeJobRepository(session)
            job = repository.get_job(job_id, for_update=True)
            if job is None:
                raise JobNotFound(job_id)

            patch.check(job.status)
            repository.apply(
                job,
                status=patch.status,
                results_count=patch.results_count,
                error_message=patch.error_message,
            )
            session.refresh(job)
            return _to_job(job)

    def get(self, job_id: uuid.UUID) -> Job | None:
        with self._session_factory() as session:
            job = ScrapeJobRepository(session).get_job(job_id)
            return _to_job(job) if job is not None else None

    def list_recent(self, *, limit: int = 50, status: str | None = None) -> list[Job]:
        with self._session_factory() as session:
            jobs = ScrapeJobRepository(session).list_jobs(limit=limit, status=status)
            return [_to_job(job) for job in jobs]


class SQLAlchemyEventStore(EventStore):
    """
    Event store relying on the unique event_url constraint for dedup.
    """

    def __init__(self, *, session_factory: sessionmaker[Session], batch_size: int = 500) -> None:
        self._session_factory = session_factory
        self._batch_size = max(1, batch_size)

    def find_by_url(self, event_url: str) -> StoredEvent | None:
        with self._session_factory() as session:
            event = EventRepository(session).get_by_url(event_url)
            return _to_stored_event(event) if event is not None else None

    def save_event(self, event: ScrapedEvent) -> SavedEvent:
        payload = {
            "organiser": event.organiser,
            "event_name": event.event_name,
            "event_date": event.event_date,
            "event_url": event.event_url,
            "distance": event.distance,
            "location": event.location,
            "metadata_json": event.metadata or None,
        }
        with self._session_factory() as session, session.begin():
            repository = EventRepository(session)
            event_id = repository.insert_if_absent(payload)
            if event_id is not None:
                return SavedEvent(event_id=event_id, created=True)

            existing_id = repository.id_for_url(event.event_url)

        if existing_id is None:
            raise RuntimeError(f"Event insert for {event.event_url} conflicted but no row was found.")
        log_event(
            logger,
            logging.INFO,
            "event_already_persisted",
            event_url=event.event_url,
            event_id=existing_id,
        )
        return SavedEvent(event_id=existing_id, created=False)

    def save_results(
        self,
        event_id: uuid.UUID,
        results: Sequence[ScrapedResult],
        distance: str,
    ) -> int:
        payloads: list[dict[str, Any]] = []
        rejected = 0
        for result in results:
            name = (result.name or "").strip()
            if not name:
                rejected += 1
                continue
            payloads.append(_result_payload(event_id, result, name=name, distance=distance))

        if rejected:
            log_event(
                logger,
                logging.WARNING,
                "results_rejected",
                event_id=event_id,
                rejected=rejected,
                reason="missing athlete name",
            )

        with self._session_factory() as session, session.begin():
            return EventRepository(session).bulk_insert_results(
                payloads,
                batch_size=self._batch_size,
            )


def _result_payload(
    event_id: uuid.UUID,
    result: ScrapedResult,
    *,
    name: str,
    distance: str,
) -> dict[str, Any]:
    return {
        "id": uuid.uuid4(),
        "event_id": event_id,
        "athlete_id": None,
        "position": result.position,
        "bib_number": result.bib_number or None,
        "name": name,
        "normalized_name": normalize_name(name),
        "gender": result.gender or None,
        "category": result.category or None,
        "finish_time": result.finish_time or None,
        "pace": result.pace or None,
        "gender_position": result.gender_position,
        "category_position": result.category_position,
        "country": result.country or None,
        "splits": dict(result.splits) or None,
        "metadata_json": {"distance": result.distance or distance},
    }


def _to_job(job: ScrapeJob) -> Job:
    return Job(
        id=job.id,
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


def _to_stored_event(event: Event) -> StoredEvent:
    return StoredEvent(
        id=event.id,
        organiser=event.organiser,
        event_name=event.event_name,
        event_url=event.event_url,
        event_date=event.event_date,
        distance=event.distance,
        location=event.location,
        metadata=dict(event.metadata_json or {}),
    )
