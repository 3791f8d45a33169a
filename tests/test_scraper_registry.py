"""
tests/test_scraper_registry.py

Capability resolution by organiser key and ordered URL matchers.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from raceingest.config import ScrapeJobSettings
from raceingest.errors import NoScraperAvailable
from raceingest.scraping.registry import ScraperRegistry, default_registry
from raceingest.scraping.scrapers import EvoChipScraper, HopasportsScraper
from tests.helpers.scrape_jobs import ScriptedCapability


class CatchAllCapability(ScriptedCapability):
    organiser = "catchall"
    url_patterns = (r"^https://",)


class TestResolve:
    def test_organiser_key_wins_over_url(self) -> None:
        acme, catch_all = ScriptedCapability(), CatchAllCapability()
        registry = ScraperRegistry([catch_all, acme])

        assert registry.resolve("AcmeRace", "https://acme.example/2024") is acme

    def test_organiser_lookup_is_exact(self) -> None:
        registry = ScraperRegistry([ScriptedCapability()])

        with pytest.raises(NoScraperAvailable):
            registry.resolve("acmerace", "https://elsewhere.example/")

    def test_url_match_when_organiser_absent_or_unknown(self) -> None:
        acme = ScriptedCapability()
        registry = ScraperRegistry([acme])

        assert registry.resolve(None, "https://acme.example/2024") is acme
        assert registry.resolve("unknown", "https://ACME.example/2024") is acme
        assert registry.resolve("", "https://acme.example/2024") is acme

    def test_unregistered_organiser_falls_through_to_url(self) -> None:
        acme = ScriptedCapability()
        registry = ScraperRegistry([acme])

        assert registry.resolve("SomeoneElse", "https://acme.example/2024") is acme

    def test_first_registered_matcher_wins(self) -> None:
        acme, catch_all = ScriptedCapability(), CatchAllCapability()

        assert ScraperRegistry([acme, catch_all]).resolve(None, "https://acme.example/") is acme
        assert ScraperRegistry([catch_all, acme]).resolve(None, "https://acme.example/") is catch_all

    def test_no_match_raises(self) -> None:
        registry = ScraperRegistry([ScriptedCapability()])

        with pytest.raises(NoScraperAvailable, match="No scraper available for URL: ftp://files.example/x"):
            registry.resolve(None, "ftp://files.example/x")


class TestRegister:
    def test_rejects_unknown_key(self) -> None:
        with pytest.raises(ValueError):
            ScraperRegistry().register(ScriptedCapability(), organiser="unknown")

    def test_override_key_and_patterns(self) -> None:
        acme = ScriptedCapability()
        registry = ScraperRegistry()
        registry.register(acme, organiser="acme-legacy", url_patterns=[r"legacy\.acme\.example"])

        assert registry.organisers == ["acme-legacy"]
        assert registry.resolve(None, "http://legacy.acme.example/r/1") is acme
        with pytest.raises(NoScraperAvailable):
            registry.resolve(None, "https://acme.example/2024")


def test_default_registry_covers_builtin_sites() -> None:
    registry = default_registry(session=MagicMock(spec=requests.Session), settings=ScrapeJobSettings())

    assert registry.organisers == ["evochip", "hopasports"]
    assert isinstance(
        registry.resolve(None, "https://results.hopasports.com/event/dubai-run-2024"),
        HopasportsScraper,
    )
    assert isinstance(
        registry.resolve(None, "https://www.evochip.hu/results/result.php?eventid=X"),
        EvoChipScraper,
    )
    assert isinstance(registry.resolve("evochip", "https://mirror.example/x"), EvoChipScraper)
