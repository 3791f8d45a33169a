"""
Domain model exports.
"""

from raceingest.domain.scrape_jobs import (
    Job,
    JobPatch,
    SavedEvent,
    ScrapeJobOutcome,
    ScrapeJobRequest,
    ScrapeJobResult,
    StoredEvent,
)

__all__ = [
    "Job",
    "JobPatch",
    "SavedEvent",
    "ScrapeJobOutcome",
    "ScrapeJobRequest",
    "ScrapeJobResult",
    "StoredEvent",
]
