"""Scraper for Speakerdeck talk pages (speakerdeck.com/{handle}/{id})."""

from __future__ import annotations

import logging
from operator import attrgetter
from urllib.parse import urlparse

from speakerdeck.common.page_element import PageElement
from speakerdeck.common.parsing import (
    SPEAKERDECK_ROOT_URL,
    find_links,
    last_path_segment,
    parse_date,
    parse_number,
)
from speakerdeck.data_types import Talk, TalkPreview
from speakerdeck.scraper.engine import (
    BaseScraper,
    Hook,
    ScrapeOptions,
    scrape,
)
from speakerdeck.scraper.fanout import resolve_all
from speakerdeck.user import check_identifier, scrape_user

logger = logging.getLogger(__name__)

DESCRIPTION_SELECTOR = ".deck-description.mb-4 p"
DECK_META_ROW = ".deck-meta .col-md-auto .row"


async def scrape_talks(
    handle: str,
    talk_id: str = "",
    opts: ScrapeOptions | None = None,
    *,
    base_url: str = SPEAKERDECK_ROOT_URL,
) -> list[Talk]:
    """Scrape one talk of a user, or all of them.

    With a talk id, only that talk is scraped. Without one, the user's page
    is scraped for talk previews, and every talk is then scraped
    concurrently. Talks that fail to scrape are logged and left out.

    Args:
        handle: The user handle.
        talk_id: Optional talk id.
        opts: Optional extensions, log level and timeout.
        base_url: Root URL of the site.

    Returns:
        The talks, sorted by date, oldest first.

    Raises:
        InvalidIdentifierException: If the handle is empty, or the handle or
            talk id contains "/".
        FetchException: If the first page could not be fetched.
        ScrapeFailedException: If the requested page could not be parsed.
    """
    check_identifier(handle, "user handle")

    if talk_id:
        check_identifier(talk_id, "talk id")
        talk = await scrape(
            f"{base_url}/{handle}/{talk_id}", TalkScraper(), opts
        )
        return [talk]

    user = await scrape_user(handle, opts, base_url=base_url)

    async def resolve(preview: TalkPreview) -> list[Talk]:
        return await scrape_talks(handle, preview.id, opts, base_url=base_url)

    return await resolve_all(
        user.talk_previews,
        resolve,
        sort_key=attrgetter("date"),
        describe=lambda preview: f"speakerdeck talk {handle}/{preview.id}",
    )


class TalkScraper(BaseScraper[Talk]):
    """Extracts everything shown on a talk page."""

    name = "TalkScraper"

    def hooks(self) -> list[Hook[Talk]]:
        return [
            Hook(".container h1.mb-4", on_talk_title),
            Hook(".col-auto.text-muted", on_talk_date),
            Hook(DESCRIPTION_SELECTOR, on_talk_description),
            Hook(".speakerdeck-embed", on_talk_data_id),
            Hook(f"{DECK_META_ROW} > div:nth-child(1) a", on_talk_category),
            Hook(f"{DECK_META_ROW} > div:nth-child(2) a", on_talk_stars),
            Hook(
                f"{DECK_META_ROW} > div:nth-child(3) span[title]",
                on_talk_views,
            ),
            Hook(
                f"{DECK_META_ROW} > div:nth-child(4) a",
                on_talk_download_link,
            ),
            Hook(f"{DECK_META_ROW} > a:nth-child(1)", on_talk_author),
        ]

    def initial_data(self) -> Talk:
        return Talk()


def on_talk_title(element: PageElement, talk: Talk) -> None:
    talk.title = element.text.strip()


def on_talk_date(element: PageElement, talk: Talk) -> None:
    talk.date = parse_date(element.text)


def on_talk_description(element: PageElement, talk: Talk) -> None:
    """Collect links from the description, and the "Hide: true" pledge."""
    text = element.text
    for link in find_links(text):
        try:
            host = urlparse(link).netloc
        except ValueError:
            logger.warning(f"Could not parse link {link!r}")
            continue
        talk.extra_links.setdefault(host, []).append(link)

    if "Hide: true" in text:
        talk.hide = True


def on_talk_data_id(element: PageElement, talk: Talk) -> None:
    talk.data_id = element.attr("data-id")


def on_talk_category(element: PageElement, talk: Talk) -> None:
    talk.category_link = element.absolute_url(element.attr("href"))
    talk.category = element.text.strip()


def on_talk_stars(element: PageElement, talk: Talk) -> None:
    talk.stars = parse_number(element.text)


def on_talk_views(element: PageElement, talk: Talk) -> None:
    title = element.attr("title")
    talk.views = parse_number(title.removesuffix(" views"))


def on_talk_download_link(element: PageElement, talk: Talk) -> None:
    talk.download_link = element.attr("href")


def on_talk_author(element: PageElement, talk: Talk) -> None:
    talk.link = element.request.url
    talk.id = last_path_segment(talk.link)
    talk.author.link = element.absolute_url(element.attr("href"))
    talk.author.handle = last_path_segment(talk.author.link)
    talk.author.name = element.text.strip()
    talk.author.avatar_link = element.absolute_url(
        element.child_attr("img", "src")
    )
