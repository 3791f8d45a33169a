"""
Base scraper abstraction for race-result capabilities.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

import requests
from bs4 import BeautifulSoup

from raceingest.config import ScrapeJobSettings
from raceingest.scraping.logging_utils import log_event
from raceingest.scraping.types import ScrapedData

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
JSON_ACCEPT = "application/json, text/html, */*"

_TEN_K = re.compile(r"(?<![\w.,])10\s?km?\b")
_FIVE_K = re.compile(r"(?<![\w.,])5\s?km?\b")
_HALF_KM = re.compile(r"(?<![\w.,])21(?:[.,]1)?\s?km?\b")
_FULL_KM = re.compile(r"(?<![\w.,])42(?:[.,]2)?\s?km?\b")


class ScraperCapability(ABC):
    """
    Organiser-specific logic that turns an event URL into ScrapedData.

    Subclasses declare the organiser key they answer to and the URL patterns
    the registry should match them against.
    """

    organiser: ClassVar[str]
    url_patterns: ClassVar[tuple[str, ...]] = ()

    def __init__(self, *, session: requests.Session, settings: ScrapeJobSettings) -> None:
        self.session = session
        self.settings = settings
        self.request_headers = {"User-Agent": settings.user_agent}

    @abstractmethod
    def scrape_event(self, url: str) -> ScrapedData:
        """
        Fetch and parse one event page with all of its results.
        """

    def fetch(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        accept: str = HTML_ACCEPT,
    ) -> requests.Response:
        response = self.session.get(
            url,
            params=params,
            headers={**self.request_headers, "Accept": accept},
            timeout=self.settings.http_timeout_seconds,
            allow_redirects=True,
        )
        response.raise_for_status()
        log_event(
            logger,
            logging.DEBUG,
            "page_fetched",
            organiser=self.organiser,
            url=response.url or url,
            status_code=response.status_code,
        )
        return response

    def fetch_soup(self, url: str, *, params: Mapping[str, Any] | None = None) -> BeautifulSoup:
        response = self.fetch(url, params=params)
        return BeautifulSoup(response.text, "html.parser")

    @staticmethod
    def page_title(soup: BeautifulSoup, *, selectors: str = "h1, h2, .event-title, title") -> str | None:
        node = soup.select_one(selectors)
        if node is None:
            return None
        text = node.get_text(" ", strip=True)
        return text or None


def parse_int(value: Any) -> int | None:
    """
    Parse rank/position cells; '-', blanks and junk become None.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text or text == "-":
        return None
    try:
        return int(text)
    except ValueError:
        return None


def distance_label(raw: str | None) -> str | None:
    """
    Map a race title or distance code to a canonical distance label.
    """

    if not raw:
        return None
    text = raw.strip().lower()
    if "half" in text or text == "hm" or _HALF_KM.search(text):
        return "Half Marathon"
    if "marathon" in text or _FULL_KM.search(text):
        return "Marathon"
    if _TEN_K.search(text):
        return "10K"
    if _FIVE_K.search(text):
        return "5K"
    return raw.strip()
