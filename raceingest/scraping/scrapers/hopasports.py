"""
Hopasports results capability.

Event pages embed a Vue `results` component whose attributes carry the
results API URL and the list of races published for the event.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import replace
from datetime import date
from typing import Any

import requests
from bs4 import BeautifulSoup

from raceingest.scraping.base import JSON_ACCEPT, ScraperCapability, distance_label, parse_int
from raceingest.scraping.logging_utils import log_event
from raceingest.scraping.types import ScrapedData, ScrapedEvent, ScrapedResult

logger = logging.getLogger(__name__)

_JSON_PARSE_WRAPPER = re.compile(r"JSON\.parse\('(.+)'\)", re.DOTALL)

_NAME_KEYS = (
    "name", "Name", "athlete", "Athlete", "runner", "Runner",
    "full_name", "fullName", "participant", "firstname", "first_name",
)
_POSITION_KEYS = ("position", "Position", "pos", "Pos", "rank", "Rank", "place", "Place", "overall_rank")
_BIB_KEYS = ("bib", "Bib", "bibNumber", "BibNumber", "number", "Number", "bib_number", "bibNo")
_GENDER_KEYS = ("gender", "Gender", "sex", "Sex", "g")
_CATEGORY_KEYS = ("category", "Category", "ageGroup", "AgeGroup", "division", "Division", "cat", "age_group")
_TIME_KEYS = (
    "time", "Time", "finishTime", "FinishTime", "chipTime", "ChipTime",
    "netTime", "NetTime", "finish_time", "net_time", "gun_time",
)
_PACE_KEYS = ("pace", "Pace", "avgPace", "AvgPace", "avg_pace")
_GENDER_RANK_KEYS = ("gender_rank", "genderRank", "gender_position", "sex_rank")
_CATEGORY_RANK_KEYS = ("category_rank", "categoryRank", "cat_rank", "age_group_rank")
_WRAPPER_KEYS = ("results", "data", "items", "athletes")


class HopasportsScraper(ScraperCapability):
    organiser = "hopasports"
    url_patterns = (r"^https?://results\.hopasports\.com/event/",)

    def scrape_event(self, url: str) -> ScrapedData:
        soup = self.fetch_soup(url)
        api_url, races = extract_results_api(soup)

        results: list[ScrapedResult] = []
        failed_races: list[str] = []
        if api_url and races:
            for race in races:
                title = str(race.get("title") or race.get("race_id"))
                try:
                    race_results = self._fetch_race_results(api_url, race)
                except (requests.RequestException, ValueError) as exc:
                    failed_races.append(title)
                    log_event(
                        logger,
                        logging.WARNING,
                        "race_results_fetch_failed",
                        url=url,
                        race=title,
                        error=str(exc),
                    )
                    continue
                results.extend(race_results)
                log_event(
                    logger,
                    logging.INFO,
                    "race_results_fetched",
                    url=url,
                    race=title,
                    results=len(race_results),
                )
        else:
            log_event(logger, logging.INFO, "results_api_not_found", url=url)
            results = parse_html_results(soup)

        distances = {result.distance for result in results if result.distance}
        metadata: dict[str, Any] = {"races": [race.get("title") for race in races]}
        if failed_races:
            metadata["failed_races"] = failed_races

        event = ScrapedEvent(
            organiser=self.organiser,
            event_name=self.page_title(soup) or _name_from_url(url),
            event_url=url,
            event_date=_extract_event_date(soup),
            distance=distances.pop() if len(distances) == 1 else None,
            metadata=metadata,
        )
        return ScrapedData(event=event, results=results)

    def _fetch_race_results(self, api_url: str, race: dict[str, Any]) -> list[ScrapedResult]:
        response = self.fetch(
            api_url,
            params={"race_id": race.get("race_id"), "pt": race.get("pt")},
            accept=JSON_ACCEPT,
        )
        distance = distance_label(str(race.get("title") or ""))
        content_type = response.headers.get("Content-Type", "")
        if "json" in content_type:
            rows = parse_api_response(response.json())
        else:
            rows = parse_html_results(BeautifulSoup(response.text, "html.parser"))
        return [_with_distance(row, distance) for row in rows]


def extract_results_api(soup: BeautifulSoup) -> tuple[str | None, list[dict[str, Any]]]:
    """
    Return (results API URL, race configs) from the embedded results component.
    """

    component = soup.select_one("#results_container results")
    if component is None:
        return None, []

    results_url = component.get("results_url")
    if not results_url:
        return None, []

    races: list[dict[str, Any]] = []
    raw_races = component.get(":races_with_pt")
    if raw_races:
        match = _JSON_PARSE_WRAPPER.search(str(raw_races))
        if match:
            payload = match.group(1).replace("\\u0022", '"').replace("\\/", "/")
            try:
                decoded = json.loads(payload)
            except json.JSONDecodeError:
                decoded = []
            if isinstance(decoded, list):
                races = [race for race in decoded if isinstance(race, dict)]

    return str(results_url), races


def parse_api_response(data: Any) -> list[ScrapedResult]:
    items: Any = data
    if isinstance(data, dict):
        items = next((data[key] for key in _WRAPPER_KEYS if isinstance(data.get(key), list)), [])
    if not isinstance(items, list):
        return []

    results: list[ScrapedResult] = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            continue
        result = parse_result_item(item, default_position=index)
        if result is not None:
            results.append(result)
    return results


def parse_result_item(item: dict[str, Any], *, default_position: int) -> ScrapedResult | None:
    name = _first_str(item, _NAME_KEYS)
    if not name:
        return None

    position = _first_int(item, _POSITION_KEYS)
    return ScrapedResult(
        name=name,
        position=position if position is not None else default_position,
        bib_number=_first_str(item, _BIB_KEYS),
        gender=_first_str(item, _GENDER_KEYS),
        category=_first_str(item, _CATEGORY_KEYS),
        finish_time=_first_str(item, _TIME_KEYS),
        pace=_first_str(item, _PACE_KEYS),
        gender_position=_first_int(item, _GENDER_RANK_KEYS) or None,
        category_position=_first_int(item, _CATEGORY_RANK_KEYS) or None,
    )


def parse_html_results(soup: BeautifulSoup) -> list[ScrapedResult]:
    """
    Fallback parser: rows whose first cell is a numeric position.
    """

    results: list[ScrapedResult] = []
    for row in soup.find_all("tr"):
        cells = [cell.get_text(strip=True) for cell in row.find_all("td")]
        if len(cells) < 3:
            continue
        position = parse_int(cells[0])
        if position is None or not cells[2]:
            continue

        def cell(index: int) -> str | None:
            return cells[index] or None if index < len(cells) else None

        results.append(
            ScrapedResult(
                name=cells[2],
                position=position,
                bib_number=cell(1),
                gender=cell(3),
                category=cell(4),
                finish_time=cell(5) or cell(4),
            )
        )
    return results


def _first_str(item: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = item.get(key)
        if value is not None:
            text = str(value).strip()
            return text or None
    return None


def _first_int(item: dict[str, Any], keys: tuple[str, ...]) -> int | None:
    for key in keys:
        if key in item:
            parsed = parse_int(item[key])
            if parsed is not None:
                return parsed
    return None


def _with_distance(result: ScrapedResult, distance: str | None) -> ScrapedResult:
    if distance is None:
        return result
    return replace(result, distance=distance)


def _extract_event_date(soup: BeautifulSoup) -> date | None:
    node = soup.select_one("time[datetime]")
    if node is None:
        return None
    try:
        return date.fromisoformat(str(node["datetime"])[:10])
    except ValueError:
        return None


def _name_from_url(url: str) -> str:
    slug = url.rstrip("/").rsplit("/", 1)[-1]
    return slug.replace("-", " ").strip().title() or url
