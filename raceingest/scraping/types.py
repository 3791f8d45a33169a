"""
Transient scrape output produced by one capability invocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(frozen=True)
class ScrapedEvent:
    """
    Event descriptor extracted from a results page.
    """

    organiser: str
    event_name: str
    event_url: str
    event_date: date | None = None
    distance: str | None = None
    location: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScrapedResult:
    """
    One participant row. `distance` overrides the event distance when a
    source publishes several races on one page.
    """

    name: str
    position: int | None = None
    bib_number: str | None = None
    gender: str | None = None
    category: str | None = None
    finish_time: str | None = None
    pace: str | None = None
    gender_position: int | None = None
    category_position: int | None = None
    country: str | None = None
    splits: dict[str, str] = field(default_factory=dict)
    distance: str | None = None


@dataclass
class ScrapedData:
    """
    One event plus its result rows, before persistence.
    """

    event: ScrapedEvent
    results: list[ScrapedResult] = field(default_factory=list)
