"""
Built-in result-site capabilities.
"""

from raceingest.scraping.scrapers.evochip import EvoChipScraper
from raceingest.scraping.scrapers.hopasports import HopasportsScraper

__all__ = ["EvoChipScraper", "HopasportsScraper"]
