"""Test utilities: a configurable scraper over the mock site's test pages.

The engine tests run scrapes against the fixed /pages/{name} documents of
tests.mock_server, with hooks assembled from the handlers below.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field

from speakerdeck.common.page_element import PageElement
from speakerdeck.location import GeocodeResult
from speakerdeck.scraper.engine import BaseScraper, Hook


@dataclass
class Notes:
    """Accumulator for engine tests."""

    items: list[str] = field(default_factory=list)


class HookListScraper(BaseScraper[Notes]):
    """Scraper running whatever hooks it is given."""

    name = "HookListScraper"

    def __init__(self, hooks: Iterable[Hook[Notes]] = ()) -> None:
        self._hooks = list(hooks)

    def hooks(self) -> list[Hook[Notes]]:
        return list(self._hooks)

    def initial_data(self) -> Notes:
        return Notes()


def collect_item(element: PageElement, notes: Notes) -> None:
    notes.items.append(element.text.strip())


def follow_next(element: PageElement, notes: Notes) -> str | None:
    return element.attr("href") or None


def reject(element: PageElement, notes: Notes) -> None:
    raise ValueError(element.text.strip())


class OverlapCounter:
    """Async handler recording how many invocations overlap.

    Each call yields to the event loop while marked active, so overlapping
    calls would be visible in ``max_active``.
    """

    def __init__(self) -> None:
        self.active = 0
        self.max_active = 0
        self.calls = 0

    async def __call__(self, element: PageElement, notes: Notes) -> None:
        self.active += 1
        self.calls += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.01)
        notes.items.append(element.text.strip())
        self.active -= 1


class FakeGeocoder:
    """Geocoder returning canned results and recording the lookups."""

    def __init__(self, results: list[GeocodeResult] | None = None) -> None:
        self.results = results or []
        self.lookups: list[str] = []

    async def geocode(self, address: str) -> list[GeocodeResult]:
        self.lookups.append(address)
        return list(self.results)


PARIS = GeocodeResult(
    formatted_address="Paris, France", lat=48.856614, lng=2.3522219
)
PARIS_TEXAS = GeocodeResult(
    formatted_address="Paris, TX, USA", lat=33.6609389, lng=-95.555513
)
