"""Scraper for Speakerdeck user pages (https://speakerdeck.com/{handle})."""

from __future__ import annotations

from speakerdeck.common.exceptions import InvalidIdentifierException
from speakerdeck.common.page_element import PageElement
from speakerdeck.common.parsing import (
    SPEAKERDECK_ROOT_URL,
    last_path_segment,
    parse_date,
    parse_number,
)
from speakerdeck.data_types import TalkPreview, User, sort_by_date
from speakerdeck.scraper.engine import (
    BaseScraper,
    Hook,
    ScrapeOptions,
    scrape,
)


def check_identifier(value: str, what: str) -> None:
    """Reject empty identifiers and identifiers containing a path separator.

    Raises:
        InvalidIdentifierException: If the identifier can't be used in a URL.
    """
    if not value:
        raise InvalidIdentifierException(f"{what} is mandatory", value)
    if "/" in value:
        raise InvalidIdentifierException(
            f"invalid {what} {value!r}, can't contain /", value
        )


async def scrape_user(
    handle: str,
    opts: ScrapeOptions | None = None,
    *,
    base_url: str = SPEAKERDECK_ROOT_URL,
) -> User:
    """Scrape a user and the previews of all their talks.

    Every page of the user's listing is visited. The previews are sorted by
    date, oldest first.

    Args:
        handle: The user handle, as used in the user's URL.
        opts: Optional extensions, log level and timeout.
        base_url: Root URL of the site.

    Returns:
        The scraped user.

    Raises:
        InvalidIdentifierException: If the handle is empty or contains "/".
        FetchException: If the user page could not be fetched.
        ScrapeFailedException: If any part of the pages could not be parsed.
    """
    check_identifier(handle, "user handle")

    user = await scrape(f"{base_url}/{handle}", UserScraper(), opts)
    user.talk_previews = sort_by_date(user.talk_previews)
    return user


class UserScraper(BaseScraper[User]):
    """Extracts the author, the abstract and the talk previews of a user."""

    name = "UserScraper"

    def hooks(self) -> list[Hook[User]]:
        return [
            Hook(".sd-main > :first-child .row", on_user_author),
            Hook(".deck-description p", on_user_abstract),
            Hook(".container a[href][title]", on_user_talk_found),
            Hook(".next .page-link[rel='next']", on_user_next_page),
        ]

    def initial_data(self) -> User:
        return User()


def on_user_author(element: PageElement, user: User) -> None:
    user.author.link = element.request.url
    user.author.name = element.child_text("h1.m-0")
    user.author.handle = element.child_text("div.text-muted")
    user.author.avatar_link = element.absolute_url(
        element.child_attr("img", "src")
    )


def on_user_abstract(element: PageElement, user: User) -> None:
    user.abstract = element.text.strip()


def on_user_talk_found(element: PageElement, user: User) -> None:
    """Add one talk preview from a talk card of the listing."""
    date = parse_date(element.child_text(".deck-preview-meta > :nth-child(1)"))
    stars = parse_number(
        element.child_text(".deck-preview-meta > :nth-child(2)")
    )
    views = parse_number(
        element.child_text(".deck-preview-meta > :nth-child(3)")
    )

    link = element.absolute_url(element.attr("href"))
    user.talk_previews.append(
        TalkPreview(
            title=element.attr("title"),
            id=last_path_segment(link),
            link=link,
            data_id=element.child_attr("div.deck-preview", "data-id"),
            date=date,
            views=views,
            stars=stars,
        )
    )


def on_user_next_page(element: PageElement, user: User) -> str | None:
    href = element.attr("href")
    if href:
        return element.absolute_url(href)
    return None
