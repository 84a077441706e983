"""Document fetcher with selector callbacks.

The Collector retrieves documents over HTTP with httpx, parses them with
lxml, and invokes the callbacks registered for every node matching a CSS
selector. Callbacks may ask for more documents to be visited through
``element.request.visit(url)``; those follow-ups are started once the
triggering document has been fully matched, and run concurrently with each
other. ``wait()`` blocks until every follow-up has been processed.

Example::

    async with Collector() as c:
        async def on_title(element: PageElement) -> None:
            print(element.text)

        c.on_html("h1", on_title)
        await c.visit("https://example.com")
        await c.wait()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

import httpx
from lxml import etree, html
from lxml.cssselect import CSSSelector

from speakerdeck.common.exceptions import (
    FetchException,
    HTTPStatusException,
    ParseException,
    RequestTimeoutException,
)
from speakerdeck.common.page_element import PageElement

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "speakerdeck-api/0.1 (+python-httpx)"

HTMLCallback = Callable[[PageElement], Awaitable[None]]
RequestCallback = Callable[["Request"], None]
ErrorCallback = Callable[["Request", FetchException], None]


@dataclass
class Request:
    """A document visit.

    Attributes:
        url: Absolute URL of the document.
        depth: 1 for the initial visit, +1 for every follow-up hop.
    """

    url: str
    depth: int = 1
    _follow_ups: list[str] = field(default_factory=list, repr=False)

    def absolute_url(self, url: str) -> str:
        """Resolve a URL relative to this request's URL."""
        return urljoin(self.url, url)

    def visit(self, url: str) -> None:
        """Schedule a follow-up visit.

        The visit starts after the current document has been fully matched.

        Args:
            url: Absolute or relative URL of the next document.
        """
        self._follow_ups.append(self.absolute_url(url))


class Collector:
    """Fetches documents and dispatches selector callbacks.

    Attributes:
        timeout: Request timeout in seconds. None means no timeout.
    """

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            timeout: Request timeout in seconds. None (default) disables it.
            user_agent: User-Agent header sent with every request.
            transport: Optional httpx transport, e.g. httpx.MockTransport.
        """
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )
        self._html_callbacks: list[tuple[str, CSSSelector, HTMLCallback]] = []
        self._request_callbacks: list[RequestCallback] = []
        self._error_callbacks: list[ErrorCallback] = []
        self._tasks: set[asyncio.Task[None]] = set()
        self._visited: set[str] = set()

    async def close(self) -> None:
        """Cancel pending follow-ups and close the HTTP client."""
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        await self._client.aclose()

    async def __aenter__(self) -> Collector:
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit - closes the client."""
        await self.close()

    # ── Registration ────────────────────────────────────────────────

    def on_html(self, selector: str, callback: HTMLCallback) -> None:
        """Register a callback for every node matching a CSS selector.

        Registrations apply to every document visited by this collector.

        Args:
            selector: CSS selector expression.
            callback: Coroutine function receiving the matched PageElement.

        Raises:
            cssselect.SelectorSyntaxError: If the selector is invalid.
        """
        compiled = CSSSelector(selector)
        self._html_callbacks.append((selector, compiled, callback))

    def on_request(self, callback: RequestCallback) -> None:
        """Register a callback invoked before each document is fetched."""
        self._request_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        """Register a callback invoked when a follow-up visit fails.

        A failing initial visit raises from visit() instead.
        """
        self._error_callbacks.append(callback)

    # ── Visiting ────────────────────────────────────────────────────

    async def visit(self, url: str) -> None:
        """Fetch a document and dispatch its matches.

        Follow-ups scheduled by callbacks keep running in the background;
        call wait() to block until they are done.

        A URL is fetched at most once per collector: follow-ups to a URL
        that was already visited or scheduled are skipped.

        Args:
            url: Absolute URL of the document.

        Raises:
            FetchException: If the document could not be retrieved or
                parsed.
        """
        self._visited.add(url)
        await self._process(Request(url=url))

    async def wait(self) -> None:
        """Block until every scheduled follow-up visit has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _fetch(self, request: Request) -> bytes:
        """Retrieve the raw document for a request.

        Raises:
            RequestTimeoutException: If the request times out.
            HTTPStatusException: If the server answers with status >= 400.
            FetchException: For any other transport failure.
        """
        for callback in self._request_callbacks:
            callback(request)

        try:
            response = await self._client.get(request.url)
        except httpx.TimeoutException as e:
            raise RequestTimeoutException(request.url, self.timeout) from e
        except httpx.HTTPError as e:
            raise FetchException(
                request.url, f"could not fetch {request.url}: {e}"
            ) from e

        if response.status_code >= 400:
            raise HTTPStatusException(request.url, response.status_code)

        return response.content

    async def _process(self, request: Request) -> None:
        content = await self._fetch(request)

        # lxml refuses to parse an empty document
        if content.strip():
            try:
                root = html.fromstring(content, base_url=request.url)
            except etree.ParserError as e:
                raise ParseException(request.url, str(e)) from e
            for selector, compiled, callback in self._html_callbacks:
                for node in compiled(root):
                    logger.debug(f"match for {selector!r} on {request.url}")
                    await callback(PageElement(node, request))

        for url in request._follow_ups:
            if url in self._visited:
                logger.debug(f"skipping already visited {url}")
                continue
            self._visited.add(url)
            follow_up = Request(url=url, depth=request.depth + 1)
            task = asyncio.create_task(self._process_follow_up(follow_up))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _process_follow_up(self, request: Request) -> None:
        try:
            await self._process(request)
        except FetchException as e:
            logger.warning(f"follow-up visit to {request.url} failed: {e}")
            for callback in self._error_callbacks:
                callback(request, e)
