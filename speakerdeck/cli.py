"""Speakerdeck CLI: scrape from the command line or serve the HTTP API.

Usage:
    speakerdeck serve                       # Start the API on 0.0.0.0:8080
    speakerdeck serve --maps-api-key KEY    # ... with talk locations
    speakerdeck user HANDLE                 # Print a user as JSON
    speakerdeck talks HANDLE                # Print every talk of a user
    speakerdeck talks HANDLE TALK_ID        # Print one talk
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Coroutine
from typing import Any

import click

from speakerdeck.common.exceptions import ScraperException
from speakerdeck.common.parsing import SPEAKERDECK_ROOT_URL
from speakerdeck.data_types import to_jsonable
from speakerdeck.scraper.engine import ScrapeOptions

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

maps_api_key_option = click.option(
    "--maps-api-key",
    envvar="SPEAKERDECK_MAPS_API_KEY",
    default="",
    help="Google Maps API key. Enables geocoding of talk locations.",
)
timeout_option = click.option(
    "--timeout",
    type=float,
    default=None,
    help="Per-request timeout in seconds. No timeout by default.",
)
base_url_option = click.option(
    "--base-url",
    default=SPEAKERDECK_ROOT_URL,
    show_default=True,
    help="Root URL of the site to scrape.",
)
verbose_option = click.option(
    "-v", "--verbose", is_flag=True, help="Verbose logging."
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
    )


def _run_and_print(coro: Coroutine[Any, Any, Any]) -> None:
    """Run a scrape and print its result as indented JSON.

    Raises:
        click.ClickException: If the scrape failed.
    """
    try:
        result = asyncio.run(coro)
    except ScraperException as e:
        raise click.ClickException(str(e)) from e
    click.echo(json.dumps(to_jsonable(result), indent=2, ensure_ascii=False))


def _talk_options(maps_api_key: str, timeout: float | None) -> ScrapeOptions:
    from speakerdeck.location import LocationExtension

    opts = ScrapeOptions(timeout=timeout)
    if maps_api_key:
        opts.extensions.append(
            LocationExtension.from_api_key(maps_api_key, timeout=timeout)
        )
    return opts


@click.group()
@click.version_option(package_name="speakerdeck-api")
def cli() -> None:
    """Speakerdeck scraper and JSON API."""


@cli.command()
@click.option(
    "--address",
    default="0.0.0.0",
    show_default=True,
    help="Address to bind the server to.",
)
@click.option(
    "--port",
    default=8080,
    show_default=True,
    type=int,
    help="Port to bind the server to.",
)
@maps_api_key_option
@timeout_option
@base_url_option
@verbose_option
def serve(
    address: str,
    port: int,
    maps_api_key: str,
    timeout: float | None,
    base_url: str,
    verbose: bool,
) -> None:
    """Start the HTTP API."""
    try:
        import uvicorn

        from speakerdeck.api.app import create_app
    except ImportError as e:
        raise click.ClickException(
            f"Missing dependency: {e}. "
            "Install the 'api' extra: pip install speakerdeck-api[api]"
        ) from e

    from speakerdeck.location import LocationExtension

    _configure_logging(verbose)

    location_extension = None
    if maps_api_key:
        location_extension = LocationExtension.from_api_key(
            maps_api_key, timeout=timeout
        )
    else:
        logging.getLogger(__name__).warning(
            "No Google Maps API key given, talk locations are disabled"
        )

    app = create_app(
        location_extension=location_extension,
        base_url=base_url,
        timeout=timeout,
    )

    click.echo(f"Starting web server at http://{address}:{port}")

    uvicorn.run(
        app,
        host=address,
        port=port,
        log_level="info" if verbose else "warning",
    )


@cli.command()
@click.argument("handle")
@timeout_option
@base_url_option
@verbose_option
def user(
    handle: str, timeout: float | None, base_url: str, verbose: bool
) -> None:
    """Scrape a user and print it as JSON."""
    from speakerdeck.user import scrape_user

    _configure_logging(verbose)
    opts = ScrapeOptions(timeout=timeout)
    _run_and_print(scrape_user(handle, opts, base_url=base_url))


@cli.command()
@click.argument("handle")
@click.argument("talk_id", required=False, default="")
@maps_api_key_option
@timeout_option
@base_url_option
@verbose_option
def talks(
    handle: str,
    talk_id: str,
    maps_api_key: str,
    timeout: float | None,
    base_url: str,
    verbose: bool,
) -> None:
    """Scrape the talks of a user, or one talk, and print them as JSON."""
    from speakerdeck.talk import scrape_talks

    _configure_logging(verbose)
    opts = _talk_options(maps_api_key, timeout)
    _run_and_print(scrape_talks(handle, talk_id, opts, base_url=base_url))


def main() -> None:
    """Entry point for the ``speakerdeck`` console script."""
    cli()
