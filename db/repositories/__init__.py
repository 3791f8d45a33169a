"""
Repository layer exports.
"""

from db.repositories.event_repository import EventRepository, normalize_name
from db.repositories.scrape_job_repository import ScrapeJobRepository

__all__ = [
    "EventRepository",
    "ScrapeJobRepository",
    "normalize_name",
]
