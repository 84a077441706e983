"""Text parsing helpers for values scraped from Speakerdeck pages."""

from __future__ import annotations

import posixpath
import re
from datetime import datetime, timezone
from urllib.parse import urlparse

SPEAKERDECK_ROOT_URL = "https://speakerdeck.com"

# English month names, full ("January 02 2006") or short ("Jan 2 2006"),
# matched explicitly so parsing does not depend on the process locale.
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
MONTHS = {
    **{name: number for number, name in enumerate(MONTH_NAMES, start=1)},
    **{name[:3]: number for number, name in enumerate(MONTH_NAMES, start=1)},
}
DATE_PATTERN = re.compile(r"([A-Za-z]+) +(\d{1,2}) +(\d{4})")

LINK_PATTERN = re.compile(r"https?://[-a-zA-Z_/0-9.#=&]*")


def parse_date(text: str) -> datetime:
    """Parse a date as displayed on Speakerdeck, e.g. "May 21, 2019".

    Args:
        text: The raw element text. Commas and newlines are ignored.

    Returns:
        Midnight UTC of the given day.

    Raises:
        ValueError: If the text matches none of the known formats.
    """
    cleaned = text.replace(",", "").replace("\n", "").strip(" ")
    match = DATE_PATTERN.fullmatch(cleaned)
    if match is None or match.group(1) not in MONTHS:
        raise ValueError(f"unrecognized date {cleaned!r}")

    month, day, year = match.groups()
    return datetime(int(year), MONTHS[month], int(day), tzinfo=timezone.utc)


def parse_number(text: str) -> int:
    """Parse a counter such as "1,234" or "1.2k".

    An empty string counts as zero.

    Raises:
        ValueError: If the text is not a number.
    """
    cleaned = text.strip().replace(",", "")
    if not cleaned:
        return 0

    multiplier = 1.0
    if "k" in cleaned:
        multiplier = 1000.0
        cleaned = cleaned.replace("k", "")

    return int(multiplier * float(cleaned))


def find_links(text: str) -> list[str]:
    """Find all http(s) links in a block of text."""
    return LINK_PATTERN.findall(text)


def last_path_segment(url: str) -> str:
    """Last segment of a URL path, e.g. the talk id of a talk URL."""
    return posixpath.basename(urlparse(url).path.rstrip("/"))
