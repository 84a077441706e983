"""Location extension: geocodes the "Location:" line of talk descriptions.

Speakers can state where a talk was given by adding a line such as
``Location: Paris, France`` to the talk description. The extension resolves
that address with the Google Geocoding API and stores the result in
``Talk.location``. ``Location: Online`` is kept as is, without a lookup.

Example::

    extension = LocationExtension.from_api_key(api_key)
    talks = await scrape_talks(
        "alice", opts=ScrapeOptions(extensions=[extension])
    )
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from speakerdeck.common.exceptions import GeocodingException
from speakerdeck.common.page_element import PageElement
from speakerdeck.data_types import Location, Talk
from speakerdeck.scraper.engine import Hook
from speakerdeck.talk import DESCRIPTION_SELECTOR

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

LOCATION_PATTERN = re.compile(r"Location: (.*)")
ONLINE_MARKER = "Location: Online"


@dataclass
class GeocodeResult:
    """One candidate returned by a geocoder."""

    formatted_address: str
    lat: float
    lng: float


class Geocoder(Protocol):
    """Resolves a free-form address to geographic candidates."""

    async def geocode(self, address: str) -> list[GeocodeResult]: ...


class GoogleGeocoder:
    """Geocoder backed by the Google Geocoding API.

    Attributes:
        api_key: Google Maps API key.
        url: Endpoint of the geocoding API.
        timeout: Request timeout in seconds. None means no timeout.
    """

    def __init__(
        self,
        api_key: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
        url: str = GOOGLE_GEOCODE_URL,
    ) -> None:
        """Initialize the geocoder.

        Args:
            api_key: Google Maps API key.
            transport: Optional httpx transport, e.g. httpx.MockTransport.
            timeout: Request timeout in seconds.
            url: Endpoint of the geocoding API.

        Raises:
            ValueError: If the API key is empty.
        """
        if not api_key:
            raise ValueError("a Google Maps API key is required")
        self.api_key = api_key
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def geocode(self, address: str) -> list[GeocodeResult]:
        """Look up an address.

        Args:
            address: Free-form address.

        Returns:
            The candidates, best match first. Empty when nothing was found.

        Raises:
            GeocodingException: If the request fails or the API answers with
                an error status.
        """
        async with httpx.AsyncClient(
            transport=self._transport, timeout=self.timeout
        ) as client:
            try:
                response = await client.get(
                    self.url, params={"address": address, "key": self.api_key}
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise GeocodingException(
                    address, "REQUEST_FAILED", str(e)
                ) from e

        payload: dict[str, Any] = response.json()
        status = payload.get("status", "")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            raise GeocodingException(
                address, status, payload.get("error_message")
            )

        return [
            GeocodeResult(
                formatted_address=result.get("formatted_address", ""),
                lat=result["geometry"]["location"]["lat"],
                lng=result["geometry"]["location"]["lng"],
            )
            for result in payload.get("results", [])
        ]


class LocationExtension:
    """Adds the geocoded location to talks.

    The hook runs on the talk description. It does nothing for other
    accumulators, so the extension can be attached to any scraper.
    """

    name = "LocationExtension"

    def __init__(self, geocoder: Geocoder) -> None:
        self.geocoder = geocoder

    @classmethod
    def from_api_key(
        cls, api_key: str, timeout: float | None = None
    ) -> LocationExtension:
        """Create the extension with a GoogleGeocoder.

        Raises:
            ValueError: If the API key is empty.
        """
        return cls(GoogleGeocoder(api_key, timeout=timeout))

    def hook(self) -> Hook[Any]:
        return Hook(DESCRIPTION_SELECTOR, self.on_description)

    async def on_description(self, element: PageElement, data: Any) -> None:
        """Fill in data.location from a "Location:" line.

        Raises:
            GeocodingException: If the geocoding request failed.
        """
        if not isinstance(data, Talk):
            return

        text = element.text
        if "Location" not in text:
            return

        if ONLINE_MARKER in text:
            data.location = Location(requested_address="Online")
            return

        match = LOCATION_PATTERN.search(text)
        if match is None:
            logger.warning(f"no location found in {text!r}")
            return

        address = match.group(1).strip()
        results = await self.geocoder.geocode(address)
        if not results:
            logger.warning(f"no geocoding result for location {address!r}")
            return
        if len(results) > 1:
            logger.warning(
                f"{len(results)} geocoding results for location {address!r}, "
                "using the first one"
            )

        best = results[0]
        data.location = Location(
            requested_address=address,
            resolved_address=best.formatted_address,
            lat=best.lat,
            lng=best.lng,
        )
