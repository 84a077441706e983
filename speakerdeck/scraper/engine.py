"""Generic hook-based scraping on top of the Collector.

A scraper declares which nodes of a page it cares about as a list of hooks,
each mapping a CSS selector to a handler, plus the record (the accumulator)
the handlers fill in. scrape() visits a URL, calls every handler for every
matching node with that one record, follows the pages handlers ask for, and
returns the populated record.

Example::

    @dataclass
    class Headline:
        text: str = ""

    def on_headline(element: PageElement, data: Headline) -> str | None:
        data.text = element.text
        return None

    class HeadlineScraper(BaseScraper[Headline]):
        name = "HeadlineScraper"

        def hooks(self) -> list[Hook[Headline]]:
            return [Hook("h1.headline", on_headline)]

        def initial_data(self) -> Headline:
            return Headline()

    headline = await scrape("https://example.com", HeadlineScraper())

Handlers report failures by raising. A failing handler does not stop the
scrape: every other match is still dispatched, and ScrapeFailedException is
raised at the end with all collected errors.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from speakerdeck.common.collector import Collector, Request
from speakerdeck.common.exceptions import (
    FetchException,
    ScrapeFailedException,
)
from speakerdeck.common.page_element import PageElement

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A handler gets the matched element and the accumulator, and returns the
# URL of a page to visit next, or None. Coroutine functions are awaited.
HookFn = Callable[[PageElement, T], "str | None | Awaitable[str | None]"]


@dataclass(frozen=True)
class Hook(Generic[T]):
    """Maps a handler to every node matched by a CSS selector.

    Attributes:
        selector: CSS selector for one or many elements in the page.
        handler: Invoked once per matched element with the accumulator.
    """

    selector: str
    handler: HookFn[T]


class Extension(Protocol):
    """An add-on contributing one extra hook to any scraper.

    The hook shares the accumulator of the scraper it is attached to, so its
    handler has to check the accumulator type and do nothing when it is not
    the type it was written for.
    """

    name: str

    def hook(self) -> Hook[Any]: ...


class BaseScraper(ABC, Generic[T]):
    """Base class for scrapers that can be passed to scrape().

    Subclasses set ``name`` and implement hooks() and initial_data().
    """

    name: str = "BaseScraper"

    @abstractmethod
    def hooks(self) -> list[Hook[T]]:
        """The hooks for all elements that should be matched."""

    @abstractmethod
    def initial_data(self) -> T:
        """A fresh accumulator, shared by the handlers of one scrape."""


@dataclass
class ScrapeOptions:
    """Extra parameters for scrape().

    Attributes:
        extensions: Extensions whose hooks are added after the scraper's own.
        log_level: Level for the scraper's engine logger, e.g. logging.DEBUG.
        timeout: Per-request timeout in seconds. None means no timeout.
    """

    extensions: list[Extension] = field(default_factory=list)
    log_level: int | None = None
    timeout: float | None = None


def compose_hooks(
    primary: Sequence[Hook[T]], extensions: Sequence[Extension]
) -> list[Hook[Any]]:
    """Append one hook per extension after the primary hooks.

    Hooks are not deduplicated: when an extension uses the same selector as a
    primary hook, both handlers run for every matching element.

    Args:
        primary: The scraper's own hooks.
        extensions: Extensions to attach, in order.

    Returns:
        A new list of hooks.
    """
    hooks: list[Hook[Any]] = list(primary)
    for extension in extensions:
        logger.debug(f"attaching extension {extension.name}")
        hooks.append(extension.hook())
    return hooks


async def _call_handler(
    handler: HookFn[T], element: PageElement, data: T
) -> str | None:
    result = handler(element, data)
    if inspect.isawaitable(result):
        return await result
    return result


async def scrape(
    url: str, scraper: BaseScraper[T], opts: ScrapeOptions | None = None
) -> T:
    """Scrape a URL with the scraper's hooks and return its accumulator.

    Every hook handler is called with the same accumulator, created by
    scraper.initial_data(), for every matching element of the page and of
    every page a handler asked to visit next. Handler calls are serialized
    by a lock, which is released before the follow-up visit is scheduled.

    Args:
        url: URL of the first page.
        scraper: The scraper providing hooks and the accumulator.
        opts: Optional extensions, log level and timeout.

    Returns:
        The populated accumulator.

    Raises:
        FetchException: If the first page could not be fetched.
        ScrapeFailedException: If any handler raised, or a follow-up page
            could not be fetched.
    """
    opts = opts or ScrapeOptions()
    scrape_logger = logging.getLogger(f"{__name__}.{scraper.name}")
    if opts.log_level is not None:
        scrape_logger.setLevel(opts.log_level)

    data = scraper.initial_data()
    hooks = compose_hooks(scraper.hooks(), opts.extensions)
    lock = asyncio.Lock()
    errors: list[Exception] = []

    def make_callback(
        hook: Hook[Any],
    ) -> Callable[[PageElement], Awaitable[None]]:
        async def on_match(element: PageElement) -> None:
            async with lock:
                scrape_logger.debug(
                    f"selector: {hook.selector!r}, "
                    f"URL: {element.request.url!r}"
                )
                try:
                    next_url = await _call_handler(hook.handler, element, data)
                except Exception as e:
                    scrape_logger.error(
                        f"error while handling selector {hook.selector!r} "
                        f"for request {element.request.url!r}: {e}"
                    )
                    errors.append(e)
                    return

            if next_url:
                element.request.visit(next_url)

        return on_match

    def on_request(request: Request) -> None:
        scrape_logger.info(f"{scraper.name} visiting page {request.url!r}")

    def on_error(request: Request, error: FetchException) -> None:
        errors.append(error)

    async with Collector(timeout=opts.timeout) as collector:
        for hook in hooks:
            collector.on_html(hook.selector, make_callback(hook))
        collector.on_request(on_request)
        collector.on_error(on_error)

        await collector.visit(url)
        await collector.wait()

    if errors:
        raise ScrapeFailedException(url, errors)
    return data
