"""
Storage layer exports.
"""

from raceingest.scraping.storage.base import EventStore, JobStore
from raceingest.scraping.storage.sqlalchemy_storage import SQLAlchemyEventStore, SQLAlchemyJobStore

__all__ = ["EventStore", "JobStore", "SQLAlchemyEventStore", "SQLAlchemyJobStore"]
