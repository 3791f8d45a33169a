"""
Storage contracts consumed by the scrape-job coordinator.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Sequence

from raceingest.domain import Job, JobPatch, SavedEvent, StoredEvent
from raceingest.scraping.types import ScrapedEvent, ScrapedResult


class JobStore(ABC):
    """
    Persists scrape jobs and applies status transitions.

    Every update must be visible to subsequent reads as soon as it returns,
    and transitions for one job id must be serialised by the store itself.
    """

    @abstractmethod
    def create(
        self,
        organiser: str,
        event_url: str,
        started_by: str | None = None,
    ) -> Job:
        """
        Create a pending job.
        """

    @abstractmethod
    def update(self, job_id: uuid.UUID, patch: JobPatch) -> Job:
        """
        Apply a patch; raises JobNotFound or InvalidJobTransition.
        """

    @abstractmethod
    def get(self, job_id: uuid.UUID) -> Job | None:
        ...

    @abstractmethod
    def list_recent(self, *, limit: int = 50, status: str | None = None) -> list[Job]:
        ...


class EventStore(ABC):
    """
    Dedup lookup and persistence of events and result rows.
    """

    @abstractmethod
    def find_by_url(self, event_url: str) -> StoredEvent | None:
        ...

    @abstractmethod
    def save_event(self, event: ScrapedEvent) -> SavedEvent:
        """
        Insert the event, or report the id of the event already stored for
        the same URL with created=False.
        """

    @abstractmethod
    def save_results(
        self,
        event_id: uuid.UUID,
        results: Sequence[ScrapedResult],
        distance: str,
    ) -> int:
        """
        Persist result rows and return how many were actually written.
        """
