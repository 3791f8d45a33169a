"""
Capability registry: organiser keys plus an ordered list of URL matchers.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

import requests

from db.models.scrape_job import UNKNOWN_ORGANISER
from raceingest.config import ScrapeJobSettings
from raceingest.errors import NoScraperAvailable
from raceingest.scraping.base import ScraperCapability
from raceingest.scraping.scrapers import EvoChipScraper, HopasportsScraper


class ScraperRegistry:
    """
    Resolves the capability for an (organiser, url) pair.

    Organiser lookup is exact. URL matching walks matchers in registration
    order and the first hit wins.
    """

    def __init__(self, capabilities: Iterable[ScraperCapability] = ()) -> None:
        self._by_organiser: dict[str, ScraperCapability] = {}
        self._matchers: list[tuple[re.Pattern[str], ScraperCapability]] = []
        for capability in capabilities:
            self.register(capability)

    def register(
        self,
        capability: ScraperCapability,
        *,
        organiser: str | None = None,
        url_patterns: Sequence[str] | None = None,
    ) -> None:
        key = organiser or capability.organiser
        if not key or key == UNKNOWN_ORGANISER:
            raise ValueError(f"Invalid organiser key '{key}' for {type(capability).__name__}.")
        self._by_organiser[key] = capability

        patterns = capability.url_patterns if url_patterns is None else url_patterns
        for pattern in patterns:
            self._matchers.append((re.compile(pattern, re.IGNORECASE), capability))

    def resolve(self, organiser: str | None, url: str) -> ScraperCapability:
        if organiser and organiser != UNKNOWN_ORGANISER:
            capability = self._by_organiser.get(organiser)
            if capability is not None:
                return capability

        for pattern, capability in self._matchers:
            if pattern.search(url):
                return capability

        raise NoScraperAvailable(f"No scraper available for URL: {url}")

    @property
    def organisers(self) -> list[str]:
        return sorted(self._by_organiser)


def default_registry(*, session: requests.Session, settings: ScrapeJobSettings) -> ScraperRegistry:
    """
    Registry with the built-in result-site capabilities.
    """

    return ScraperRegistry(
        [
            HopasportsScraper(session=session, settings=settings),
            EvoChipScraper(session=session, settings=settings),
        ]
    )
