"""FastAPI application serving scraped users and talks as JSON.

Endpoints:

- ``GET /``: welcome page listing the endpoints.
- ``GET /api/users/{handle}``: the user and the previews of their talks.
- ``GET /api/talks/{handle}``: every talk of the user, sorted by date.
- ``GET /api/talks/{handle}/{talk_id}``: a single talk, as a list.

Malformed identifiers answer 400, and scraping failures answer 500, both
with the error message as plain text.
"""

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from speakerdeck.common.exceptions import (
    InvalidIdentifierException,
    ScraperException,
)
from speakerdeck.common.parsing import SPEAKERDECK_ROOT_URL
from speakerdeck.data_types import to_jsonable
from speakerdeck.location import LocationExtension
from speakerdeck.scraper.engine import ScrapeOptions
from speakerdeck.talk import scrape_talks
from speakerdeck.user import scrape_user

logger = logging.getLogger(__name__)

VALID_PATH = re.compile(r"^/api/(talks|users)/([a-zA-Z0-9/-]+)$")

WELCOME_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Speakerdeck API</title>
</head>
<body>
  <h1>Welcome to the Speakerdeck API!</h1>
  <p>Available endpoints:</p>
  <ul>
    <li><code>/api/users/{user}</code>: a user and the previews of their
      talks</li>
    <li><code>/api/talks/{user}</code>: every talk of a user</li>
    <li><code>/api/talks/{user}/{talk}</code>: a single talk</li>
  </ul>
</body>
</html>
"""


class PrettyJSONResponse(JSONResponse):
    """JSON response indented by two spaces."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode(
            "utf-8"
        )


def create_app(
    location_extension: LocationExtension | None = None,
    base_url: str = SPEAKERDECK_ROOT_URL,
    timeout: float | None = None,
) -> FastAPI:
    """Create a new FastAPI application.

    Args:
        location_extension: If given, talks are enriched with their
            geocoded location.
        base_url: Root URL of the scraped site.
        timeout: Per-request scraping timeout in seconds.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Speakerdeck API",
        description="Scraped Speakerdeck users and talks as JSON",
        version="0.1.0",
    )

    app.state.location_extension = location_extension
    app.state.base_url = base_url
    app.state.timeout = timeout

    app.add_exception_handler(
        InvalidIdentifierException, _invalid_identifier_handler
    )
    app.add_exception_handler(ScraperException, _scraper_error_handler)

    app.add_api_route(
        "/", welcome, methods=["GET"], response_class=HTMLResponse
    )
    app.add_api_route("/api/users/{handle:path}", get_user, methods=["GET"])
    app.add_api_route(
        "/api/talks/{talk_path:path}", get_talks, methods=["GET"]
    )

    return app


# ── Error handling ──────────────────────────────────────────────────


async def _invalid_identifier_handler(
    request: Request, exc: Exception
) -> PlainTextResponse:
    return PlainTextResponse(str(exc), status_code=400)


async def _scraper_error_handler(
    request: Request, exc: Exception
) -> PlainTextResponse:
    logger.error(f"Handler for path {request.url.path!r} failed: {exc}")
    return PlainTextResponse(str(exc), status_code=500)


def _not_found() -> PlainTextResponse:
    return PlainTextResponse("404 page not found", status_code=404)


def _scrape_options(request: Request, talks: bool) -> ScrapeOptions:
    opts = ScrapeOptions(timeout=request.app.state.timeout)
    extension = request.app.state.location_extension
    if talks and extension is not None:
        opts.extensions.append(extension)
    return opts


def _respond(request: Request, started: float, data: Any) -> JSONResponse:
    elapsed = time.perf_counter() - started
    logger.info(
        f"Handler for path {request.url.path!r} responded in {elapsed:.3f}s"
    )
    return PrettyJSONResponse(to_jsonable(data))


# ── Routes ──────────────────────────────────────────────────────────


async def welcome() -> HTMLResponse:
    return HTMLResponse(content=WELCOME_PAGE)


async def get_user(request: Request, handle: str) -> Any:
    started = time.perf_counter()
    if not VALID_PATH.match(request.url.path):
        return _not_found()
    if "/" in handle:
        return PlainTextResponse(
            "invalid user name, can't contain /", status_code=400
        )

    user = await scrape_user(
        handle,
        _scrape_options(request, talks=False),
        base_url=request.app.state.base_url,
    )
    return _respond(request, started, user)


async def get_talks(request: Request, talk_path: str) -> Any:
    started = time.perf_counter()
    if not VALID_PATH.match(request.url.path):
        return _not_found()

    parts = talk_path.split("/")
    if len(parts) > 2:
        return PlainTextResponse(
            "invalid talk name, argument should be of form {user} or "
            "{user}/{talk}",
            status_code=400,
        )
    handle = parts[0]
    talk_id = parts[1] if len(parts) == 2 else ""

    talks = await scrape_talks(
        handle,
        talk_id,
        _scrape_options(request, talks=True),
        base_url=request.app.state.base_url,
    )
    return _respond(request, started, talks)
