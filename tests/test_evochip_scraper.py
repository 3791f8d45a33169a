"""
tests/test_evochip_scraper.py

EvoChip capability against canned paginated result tables.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import requests
from bs4 import BeautifulSoup

from raceingest.config import ScrapeJobSettings
from raceingest.scraping.scrapers.evochip import (
    EvoChipScraper,
    count_pages,
    parse_results_table,
    with_page,
)
from tests.helpers.scrape_jobs import FakeResponse

EVENT_URL = "https://www.evochip.hu/results/result.php?distance=10k&eventid=BudapestRun2024"

PAGE_ONE = """
<html><body>
<h1>Budapest Run 2024</h1>
<table class="layout"><tr><td>Menu</td></tr></table>
<table>
  <tr><th>Bib</th><th>Name</th><th>Country</th><th>5 km</th><th>Finish</th><th>Gender rank</th><th>Cat. rank</th></tr>
  <tr><td>501</td><td>Kovacs Peter</td><td>HUN</td><td>00:17:10</td><td>00:34:55</td><td>1</td><td>1</td></tr>
  <tr><td>502</td><td>Nagy Eva</td><td>HUN</td><td></td><td></td><td>-</td><td>2</td></tr>
</table>
<div class="pager">
  <a href="result.php?distance=10k&amp;eventid=BudapestRun2024&amp;page=2">2</a>
  <a href="result.php?distance=10k&amp;eventid=BudapestRun2024&amp;page=3">3</a>
</div>
</body></html>
"""

PAGE_TWO = """
<table>
  <tr><td>Bib</td><td>Name</td><td>Country</td><td>5 km</td><td>Finish</td><td>Gender rank</td><td>Cat. rank</td></tr>
  <tr><td>503</td><td>Szabo Anna</td><td>AUT</td><td>00:19:00</td><td>00:39:30</td><td>2</td><td>1</td></tr>
</table>
"""

PAGE_THREE = "<html><body><p>Maintenance</p></body></html>"


def _scraper(pages: dict[str, str]) -> EvoChipScraper:
    session = MagicMock(spec=requests.Session)
    session.get.side_effect = lambda url, **kwargs: FakeResponse(text=pages[url], url=url)
    return EvoChipScraper(session=session, settings=ScrapeJobSettings())


class TestPagination:
    def test_counts_highest_page_link(self) -> None:
        assert count_pages(BeautifulSoup(PAGE_ONE, "html.parser")) == 3

    def test_single_page_without_links(self) -> None:
        assert count_pages(BeautifulSoup(PAGE_TWO, "html.parser")) == 1

    def test_with_page_replaces_query_param(self) -> None:
        assert with_page(EVENT_URL, 2) == (
            "https://www.evochip.hu/results/result.php?distance=10k&eventid=BudapestRun2024&page=2"
        )
        assert with_page(with_page(EVENT_URL, 2), 3).endswith("&page=3")


class TestParseResultsTable:
    def test_maps_header_columns(self) -> None:
        results = parse_results_table(BeautifulSoup(PAGE_ONE, "html.parser"))

        assert [result.name for result in results] == ["Kovacs Peter", "Nagy Eva"]
        first, second = results
        assert first.position == 1
        assert first.bib_number == "501"
        assert first.country == "HUN"
        assert first.finish_time == "00:34:55"
        assert first.splits == {"5km": "00:17:10"}
        assert first.gender_position == 1
        assert second.finish_time == "-"
        assert second.splits == {}
        assert second.gender_position is None
        assert second.category_position == 2

    def test_start_position_offsets_rows(self) -> None:
        results = parse_results_table(BeautifulSoup(PAGE_TWO, "html.parser"), start_position=3)
        assert [result.position for result in results] == [3]

    def test_missing_table(self) -> None:
        assert parse_results_table(BeautifulSoup(PAGE_THREE, "html.parser")) is None


def test_scrape_event_walks_every_page() -> None:
    scraper = _scraper(
        {
            EVENT_URL: PAGE_ONE,
            with_page(EVENT_URL, 2): PAGE_TWO,
            with_page(EVENT_URL, 3): PAGE_THREE,
        }
    )

    data = scraper.scrape_event(EVENT_URL)

    assert data.event.organiser == "evochip"
    assert data.event.event_name == "Budapest Run 2024"
    assert data.event.distance == "10K"
    assert data.event.metadata == {"source_event_id": "BudapestRun2024", "pages": 3}
    assert [(result.position, result.name) for result in data.results] == [
        (1, "Kovacs Peter"),
        (2, "Nagy Eva"),
        (3, "Szabo Anna"),
    ]


def test_distance_defaults_to_half_marathon() -> None:
    url = "https://www.evochip.hu/results/result.php?eventid=X"
    scraper = _scraper({url: PAGE_TWO})

    assert scraper.scrape_event(url).event.distance == "Half Marathon"
