"""
Error taxonomy for scrape-job orchestration.
"""

from __future__ import annotations

import uuid


class ScrapeJobError(Exception):
    """
    Base class for failures that end a scrape job in the failed state.

    `job_id` is attached once the coordinator has mapped the failure onto a
    job record; errors raised inside pipeline steps carry `None`.
    """

    def __init__(
        self,
        message: str,
        *,
        job_id: uuid.UUID | None = None,
        original_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.job_id = job_id
        self.original_message = original_message or message

    def for_job(self, job_id: uuid.UUID) -> ScrapeJobError:
        """
        Return an error of the same kind that names the failed job.
        """

        return type(self)(
            f"Scraping job {job_id} failed: {self.message}",
            job_id=job_id,
            original_message=self.message,
        )


class NoScraperAvailable(ScrapeJobError):
    """No capability resolves for the given organiser or URL."""


class SiteUnreachable(ScrapeJobError):
    """The connectivity probe failed before anything was written."""

    @classmethod
    def for_url(cls, url: str) -> SiteUnreachable:
        return cls(
            "Site appears to be down or unreachable. "
            f"Please verify {url} is accessible before scraping."
        )


class ScrapeFailure(ScrapeJobError):
    """The capability raised while fetching or parsing; nothing was persisted."""


class PersistenceFailure(ScrapeJobError):
    """A storage read or write failed; partial writes are not rolled back."""


class JobStoreError(Exception):
    """Base exception for job store misuse."""


class JobNotFound(JobStoreError):
    """Raised when an update targets an unknown job id."""

    def __init__(self, job_id: uuid.UUID) -> None:
        super().__init__(f"Scrape job not found: {job_id}")
        self.job_id = job_id


class InvalidJobTransition(JobStoreError):
    """Raised when a patch would break the pending -> running -> terminal lifecycle."""
