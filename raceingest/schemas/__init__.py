"""
Output schema exports.
"""

from raceingest.schemas.scrape_jobs import (
    ScrapeJobOutcomeResponse,
    ScrapeJobStatusListResponse,
    ScrapeJobStatusResponse,
)

__all__ = [
    "ScrapeJobOutcomeResponse",
    "ScrapeJobStatusListResponse",
    "ScrapeJobStatusResponse",
]
