"""Records scraped from Speakerdeck.

The models are pydantic models so the API and the CLI can serialize them
with the same camelCase keys. They are mutable: scrapers create an empty
record and hook handlers fill in its fields one by one.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from operator import attrgetter
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Serializes as "0001-01-01T00:00:00Z", the value of a date that was never set
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

DatedT = TypeVar("DatedT", bound="TalkPreview")


class Record(BaseModel):
    """Base class for scraped records (camelCase JSON keys)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Author(Record):
    """The Speakerdeck profile of the person that created the presentations.

    Attributes:
        name: Human-friendly name of the author.
        handle: Preferred nickname of the author, used in URLs.
        link: Link to the author's page.
        avatar_link: Link to the author's avatar.
    """

    name: str = ""
    handle: str = ""
    link: str = ""
    avatar_link: str = ""


class TalkPreview(Record):
    """A talk as listed on its author's page.

    Attributes:
        title: Talk title.
        id: URL-encoded descriptor of the talk, as in
            https://speakerdeck.com/{user-handle}/{talk-id}. Unique per user,
            not globally.
        views: How many views the talk has got.
        stars: How many users have starred the talk.
        link: Link to the talk on Speakerdeck.
        data_id: Key used to embed the presentation on other websites.
        date: Presentation date.
    """

    title: str = ""
    id: str = ""
    views: int = 0
    stars: int = 0
    link: str = ""
    data_id: str = Field(default="", alias="dataID")
    date: datetime = ZERO_TIME


class User(Record):
    """A user as browsed on https://speakerdeck.com/{user-handle}.

    Attributes:
        author: The user's profile.
        abstract: Short description of the user.
        talk_previews: Every talk listed on the user's pages.
    """

    author: Author = Field(default_factory=Author)
    abstract: str = ""
    talk_previews: list[TalkPreview] = Field(default_factory=list)


class Location(Record):
    """Geographical location of a talk.

    Populated by the LocationExtension from a "Location: <address>" line in
    the talk description.

    Attributes:
        requested_address: The address as written in the description.
        resolved_address: The address as resolved by the geocoder.
        lat: Latitude.
        lng: Longitude.
    """

    requested_address: str = ""
    resolved_address: str = ""
    lat: float = 0.0
    lng: float = 0.0


class Talk(TalkPreview):
    """A presentation on Speakerdeck.

    Attributes:
        author: Profile of the person that created the presentation.
        category: Speakerdeck category, e.g. "Technology".
        category_link: Link to other presentations of the same category.
        download_link: Link to the underlying PDF.
        extra_links: URLs found in the description, keyed by host name.
        hide: True if the description contains "Hide: true". Hidden talks
            are returned as normal; API users choose whether to respect it.
        location: Set by the LocationExtension, if enabled.
    """

    author: Author = Field(default_factory=Author)
    category: str = ""
    category_link: str = ""
    download_link: str = ""
    extra_links: dict[str, list[str]] = Field(default_factory=dict)
    hide: bool = False
    location: Location | None = None


def sort_by_date(records: Iterable[DatedT]) -> list[DatedT]:
    """Sort records ascending by date.

    The sort is stable: records with the same date keep their order.
    """
    return sorted(records, key=attrgetter("date"))


def to_jsonable(value: BaseModel | Iterable[BaseModel]) -> Any:
    """Convert a record, or a list of records, to JSON-compatible data.

    Unset optional fields (a talk without a location) are left out.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return [to_jsonable(item) for item in value]
