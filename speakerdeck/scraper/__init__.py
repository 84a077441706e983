"""Generic, hook-based scraping.

See speakerdeck.scraper.engine for how to write a scraper, and
speakerdeck.scraper.fanout for concurrent sub-scraping.
"""

from speakerdeck.scraper.engine import (
    BaseScraper,
    Extension,
    Hook,
    HookFn,
    ScrapeOptions,
    compose_hooks,
    scrape,
)
from speakerdeck.scraper.fanout import resolve_all

__all__ = [
    "BaseScraper",
    "Extension",
    "Hook",
    "HookFn",
    "ScrapeOptions",
    "compose_hooks",
    "resolve_all",
    "scrape",
]
