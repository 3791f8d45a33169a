"""
raceingest/services/scrape_job_service.py

Scrape-job coordinator: turns one (organiser, event URL) request into a
tracked job and drives it through pending -> running -> completed/failed.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Generic, TypeVar

import requests
from sqlalchemy.orm import Session, sessionmaker

from db.models.scrape_job import UNKNOWN_ORGANISER, ScrapeJobStatus
from raceingest.config import ScrapeJobSettings, get_scrape_job_settings
from raceingest.domain import Job, JobPatch, ScrapeJobOutcome, ScrapeJobRequest, ScrapeJobResult
from raceingest.errors import (
    JobStoreError,
    NoScraperAvailable,
    PersistenceFailure,
    ScrapeFailure,
    ScrapeJobError,
    SiteUnreachable,
)
from raceingest.scraping.connectivity import ConnectivityProbe
from raceingest.scraping.logging_utils import log_job_event
from raceingest.scraping.registry import ScraperRegistry, default_registry
from raceingest.scraping.storage import EventStore, JobStore, SQLAlchemyEventStore, SQLAlchemyJobStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN_DISTANCE = "Unknown"


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """
    Value or error produced by one pipeline step.
    """

    value: T | None = None
    error: ScrapeJobError | None = None


@dataclass(frozen=True)
class PipelineOutcome:
    event_id: uuid.UUID | None = None
    results_count: int = 0
    deduplicated: bool = False
    error: ScrapeJobError | None = None


def attempt(
    step: Callable[[], T],
    *,
    error_type: type[ScrapeJobError],
    context: str,
) -> StepResult[T]:
    """
    Run one collaborator call and turn any exception into an error value.
    """

    try:
        return StepResult(value=step())
    except ScrapeJobError as exc:
        return StepResult(error=exc)
    except Exception as exc:
        return StepResult(error=error_type(f"{context}: {type(exc).__name__}: {exc}"))


class ScrapeJobCoordinator:
    """
    Coordinates job tracking, capability resolution, dedup, connectivity
    probing, scraping and persistence for scrape jobs.
    """

    def __init__(
        self,
        *,
        job_store: JobStore,
        event_store: EventStore,
        registry: ScraperRegistry,
        probe: ConnectivityProbe,
        settings: ScrapeJobSettings | None = None,
    ) -> None:
        self._job_store = job_store
        self._event_store = event_store
        self._registry = registry
        self._probe = probe
        self._settings = settings or ScrapeJobSettings()

    def process_scrape_job(self, request: ScrapeJobRequest) -> ScrapeJobResult:
        """
        Run one job to completion.

        Raises the pipeline error, re-issued with the job id in its message,
        after the job has been marked failed.
        """

        job = self._job_store.create(
            request.organiser or UNKNOWN_ORGANISER,
            request.event_url,
            request.started_by,
        )
        log_job_event(logger, logging.INFO, "scrape_job_created", job, started_by=job.started_by)
        self._job_store.update(job.id, JobPatch(status=ScrapeJobStatus.RUNNING))

        outcome = self._run_pipeline(job, request)
        if outcome.error is not None:
            raise self._fail(job, outcome.error) from outcome.error

        return self._complete(job, outcome)

    def process_scrape_jobs(
        self,
        job_requests: Sequence[ScrapeJobRequest],
        *,
        max_workers: int | None = None,
    ) -> list[ScrapeJobOutcome]:
        """
        Run independent jobs concurrently, one sequential pipeline each.

        Outcomes are returned in request order.
        """

        if not job_requests:
            return []

        workers = max(1, min(max_workers or self._settings.max_workers, len(job_requests)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scrape-job") as executor:
            futures = [executor.submit(self._process_captured, request) for request in job_requests]
            return [future.result() for future in futures]

    def _process_captured(self, request: ScrapeJobRequest) -> ScrapeJobOutcome:
        try:
            return ScrapeJobOutcome(request=request, result=self.process_scrape_job(request))
        except ScrapeJobError as exc:
            return ScrapeJobOutcome(request=request, error=exc)
        except Exception as exc:
            # job tracking itself failed; keep the rest of the batch
            logger.exception("Scrape job could not be tracked url=%s", request.event_url)
            return ScrapeJobOutcome(
                request=request,
                error=PersistenceFailure(f"{type(exc).__name__}: {exc}"),
            )

    def _run_pipeline(self, job: Job, request: ScrapeJobRequest) -> PipelineOutcome:
        url = request.event_url

        resolved = attempt(
            lambda: self._registry.resolve(request.organiser, url),
            error_type=NoScraperAvailable,
            context="Scraper resolution failed",
        )
        if resolved.error is not None:
            return PipelineOutcome(error=resolved.error)
        capability = resolved.value

        existing = attempt(
            lambda: self._event_store.find_by_url(url),
            error_type=PersistenceFailure,
            context="Event lookup failed",
        )
        if existing.error is not None:
            return PipelineOutcome(error=existing.error)
        if existing.value is not None:
            log_job_event(logger, logging.INFO, "event_already_ingested", job, event_id=existing.value.id)
            return PipelineOutcome(event_id=existing.value.id, deduplicated=True)

        if not self._probe.check(url, self._settings.probe_timeout_seconds):
            return PipelineOutcome(error=SiteUnreachable.for_url(url))

        log_job_event(logger, logging.INFO, "scrape_started", job, capability=type(capability).__name__)
        scraped = attempt(
            lambda: capability.scrape_event(url),
            error_type=ScrapeFailure,
            context="Scrape failed",
        )
        if scraped.error is not None:
            return PipelineOutcome(error=scraped.error)
        data = scraped.value

        # Dedup is keyed on the submitted URL, whatever the page redirected to.
        event = data.event if data.event.event_url == url else replace(data.event, event_url=url)
        saved = attempt(
            lambda: self._event_store.save_event(event),
            error_type=PersistenceFailure,
            context="Failed to save event",
        )
        if saved.error is not None:
            return PipelineOutcome(error=saved.error)
        if not saved.value.created:
            log_job_event(
                logger,
                logging.WARNING,
                "event_ingested_concurrently",
                job,
                event_id=saved.value.event_id,
            )
            return PipelineOutcome(event_id=saved.value.event_id, deduplicated=True)

        event_id = saved.value.event_id
        if not data.results:
            return PipelineOutcome(event_id=event_id)

        written = attempt(
            lambda: self._event_store.save_results(
                event_id,
                data.results,
                event.distance or UNKNOWN_DISTANCE,
            ),
            error_type=PersistenceFailure,
            context="Failed to save results",
        )
        if written.error is not None:
            return PipelineOutcome(event_id=event_id, error=written.error)
        return PipelineOutcome(event_id=event_id, results_count=written.value)

    def _complete(self, job: Job, outcome: PipelineOutcome) -> ScrapeJobResult:
        try:
            completed = self._job_store.update(
                job.id,
                JobPatch(status=ScrapeJobStatus.COMPLETED, results_count=outcome.results_count),
            )
        except JobStoreError:
            raise
        except Exception as exc:
            failure = PersistenceFailure(
                f"Failed to record job completion: {type(exc).__name__}: {exc}"
            )
            raise self._fail(job, failure) from exc

        log_job_event(
            logger,
            logging.INFO,
            "scrape_job_completed",
            job,
            event_id=outcome.event_id,
            results_count=outcome.results_count,
            deduplicated=outcome.deduplicated,
        )
        return ScrapeJobResult(
            job=completed,
            event_id=outcome.event_id,
            results_count=outcome.results_count,
        )

    def _fail(self, job: Job, error: ScrapeJobError) -> ScrapeJobError:
        # JobPatch rejects a failed job without a message
        message = (error.message or type(error).__name__)[: self._settings.error_message_max_length]
        log_job_event(
            logger,
            logging.ERROR,
            "scrape_job_failed",
            job,
            error_kind=type(error).__name__,
            error=message,
        )
        try:
            self._job_store.update(
                job.id,
                JobPatch(status=ScrapeJobStatus.FAILED, error_message=message),
            )
        except Exception:
            logger.exception("Failed to persist failed scrape job state id=%s", job.id)
        return error.for_job(job.id)


def build_scrape_job_coordinator(
    *,
    session_factory: sessionmaker[Session],
    http_session: requests.Session,
    settings: ScrapeJobSettings | None = None,
    registry: ScraperRegistry | None = None,
) -> ScrapeJobCoordinator:
    """
    Wire the SQLAlchemy stores, probe and registry around one coordinator.

    The caller owns the session factory's engine and the HTTP session.
    """

    resolved_settings = settings or get_scrape_job_settings()
    return ScrapeJobCoordinator(
        job_store=SQLAlchemyJobStore(session_factory=session_factory),
        event_store=SQLAlchemyEventStore(
            session_factory=session_factory,
            batch_size=resolved_settings.results_batch_size,
        ),
        registry=registry or default_registry(session=http_session, settings=resolved_settings),
        probe=ConnectivityProbe(session=http_session, user_agent=resolved_settings.user_agent),
        settings=resolved_settings,
    )
