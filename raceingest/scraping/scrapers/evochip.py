"""
EvoChip results capability.

Results are served as a paginated HTML table. The first row holds the
column headers (bib, name, country, split checkpoints, finish, ranks).
"""

from __future__ import annotations

import logging
import re
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from bs4 import BeautifulSoup, Tag

from raceingest.scraping.base import ScraperCapability, distance_label, parse_int
from raceingest.scraping.logging_utils import log_event
from raceingest.scraping.types import ScrapedData, ScrapedEvent, ScrapedResult

logger = logging.getLogger(__name__)

_PAGE_PARAM = re.compile(r"[?&]page=(\d+)")
_SPLIT_HEADER = re.compile(r"^(\d+(?:\.\d+)?)\s*km$")


class EvoChipScraper(ScraperCapability):
    organiser = "evochip"
    url_patterns = (r"^https?://(?:[a-z0-9-]+\.)*evochip\.[a-z.]+/",)

    def scrape_event(self, url: str) -> ScrapedData:
        query = parse_qs(urlparse(url).query)
        distance_code = (query.get("distance") or ["hm"])[0]
        distance = distance_label(distance_code)

        first_page = self.fetch_soup(url)
        total_pages = count_pages(first_page)
        log_event(logger, logging.INFO, "evochip_pages_found", url=url, pages=total_pages)

        results: list[ScrapedResult] = []
        for page in range(1, total_pages + 1):
            soup = first_page if page == 1 else self.fetch_soup(with_page(url, page))
            page_results = parse_results_table(soup, start_position=len(results) + 1)
            if page_results is None:
                log_event(logger, logging.WARNING, "evochip_table_missing", url=url, page=page)
                continue
            results.extend(page_results)

        event = ScrapedEvent(
            organiser=self.organiser,
            event_name=self.page_title(first_page) or url,
            event_url=url,
            distance=distance,
            metadata={
                "source_event_id": (query.get("eventid") or [None])[0],
                "pages": total_pages,
            },
        )
        return ScrapedData(event=event, results=results)


def count_pages(soup: BeautifulSoup) -> int:
    """
    Highest page number linked from the pagination, defaulting to 1.
    """

    numbers = []
    for link in soup.select('a[href*="page="]'):
        match = _PAGE_PARAM.search(str(link.get("href", "")))
        if match:
            numbers.append(int(match.group(1)))
    if numbers:
        return max(numbers)

    for link in soup.find_all("a"):
        if "last" in link.get_text(strip=True).lower():
            match = _PAGE_PARAM.search(str(link.get("href", "")))
            if match:
                return int(match.group(1))
    return 1


def with_page(url: str, page: int) -> str:
    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    query["page"] = [str(page)]
    return urlunparse(parsed._replace(query=urlencode(query, doseq=True)))


def find_results_table(soup: BeautifulSoup) -> Tag | None:
    for table in soup.find_all("table"):
        first_row = table.find("tr")
        if first_row is None:
            continue
        header_text = first_row.get_text(" ", strip=True).lower()
        if "bib" in header_text and "name" in header_text:
            return table
    return None


def map_columns(header_row: Tag) -> tuple[dict[str, int], dict[str, int]]:
    """
    Return (field -> column index, split label -> column index).
    """

    columns: dict[str, int] = {}
    splits: dict[str, int] = {}
    for index, cell in enumerate(header_row.find_all(["th", "td"])):
        text = cell.get_text(" ", strip=True).lower()
        split = _SPLIT_HEADER.match(text)
        if split:
            splits[f"{split.group(1)}km"] = index
        elif "bib" in text:
            columns["bib"] = index
        elif "gender" in text and "rank" in text:
            columns["gender_rank"] = index
        elif ("cat" in text or "category" in text) and "rank" in text:
            columns["category_rank"] = index
        elif "name" in text:
            columns["name"] = index
        elif "country" in text:
            columns["country"] = index
        elif "finish" in text:
            columns["finish"] = index
    return columns, splits


def parse_results_table(soup: BeautifulSoup, *, start_position: int = 1) -> list[ScrapedResult] | None:
    """
    Parse one results page. Returns None when the page has no results table.
    """

    table = find_results_table(soup)
    if table is None:
        return None

    rows = table.find_all("tr")
    columns, split_columns = map_columns(rows[0])

    results: list[ScrapedResult] = []
    for row in rows[1:]:
        cells = [cell.get_text(strip=True) for cell in row.find_all("td")]
        if len(cells) < 3:
            continue

        def value(key: str) -> str:
            index = columns.get(key)
            return cells[index] if index is not None and index < len(cells) else ""

        name = value("name")
        if not name:
            continue

        splits = {
            label: cells[index]
            for label, index in split_columns.items()
            if index < len(cells) and cells[index]
        }
        results.append(
            ScrapedResult(
                name=name,
                position=start_position + len(results),
                bib_number=value("bib") or None,
                finish_time=value("finish") or "-",
                gender_position=parse_int(value("gender_rank")),
                category_position=parse_int(value("category_rank")),
                country=value("country") or None,
                splits=splits,
            )
        )
    return results
