"""
Service exports.
"""

from raceingest.services.scrape_job_service import ScrapeJobCoordinator, build_scrape_job_coordinator

__all__ = ["ScrapeJobCoordinator", "build_scrape_job_coordinator"]
