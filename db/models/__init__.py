"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.event import Event
from db.models.race_result import RaceResult
from db.models.scrape_job import ScrapeJob, ScrapeJobStatus

__all__ = [
    "Event",
    "RaceResult",
    "ScrapeJob",
    "ScrapeJobStatus",
]
