"""Exception types for scraper errors.

Every error raised by the scraping core derives from ScraperException, so
callers that tolerate failures (the fan-out aggregator, the HTTP API) can
catch one type.
"""

from typing import Any


class ScraperException(Exception):
    """Base class for all errors raised while scraping.

    Attributes:
        message: Human-readable description of the failure.
        context: Additional context (URL, selector, counts, ...).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            context: Optional dict of additional context.
        """
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class InvalidIdentifierException(ScraperException):
    """Raised when a user handle or talk id is malformed.

    This is raised before any page is fetched.
    """

    def __init__(self, message: str, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(message)


class ScrapeFailedException(ScraperException):
    """Raised when one or more hook handlers failed during a scrape.

    The engine keeps dispatching after a handler fails, and raises this
    once every document of the scrape has been processed.

    Attributes:
        url: The URL the scrape started from.
        errors: The exceptions raised by handlers, in the order recorded.
    """

    def __init__(self, url: str, errors: list[Exception]) -> None:
        """Initialize the exception.

        Args:
            url: The URL the scrape started from.
            errors: The exceptions raised by handlers.
        """
        self.url = url
        self.errors = list(errors)
        error_summary = ", ".join(str(err) for err in self.errors)
        super().__init__(
            f"errors occurred during scraping: [{error_summary}]"
        )


# =============================================================================
# Fetch errors
# =============================================================================


class FetchException(ScraperException):
    """Raised when a document could not be retrieved.

    Attributes:
        url: The URL that could not be fetched.
    """

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(message)


class HTTPStatusException(FetchException):
    """Raised when the server answers with an error status code.

    Attributes:
        status_code: The HTTP status code received.
    """

    def __init__(self, url: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(url, f"HTTP {status_code} from {url}")


class RequestTimeoutException(FetchException):
    """Raised when a request takes longer than the configured timeout.

    Attributes:
        timeout_seconds: The timeout duration in seconds.
    """

    def __init__(self, url: str, timeout_seconds: float | None) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            url, f"Request to {url} timed out after {timeout_seconds}s"
        )


class ParseException(FetchException):
    """Raised when a retrieved document cannot be parsed as HTML.

    lxml rejects documents without any element, e.g. a comment-only body.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(url, f"could not parse {url}: {reason}")


class GeocodingException(ScraperException):
    """Raised when the geocoding service rejects a lookup.

    Attributes:
        address: The address that was looked up.
        status: The status string returned by the service.
    """

    def __init__(
        self, address: str, status: str, detail: str | None = None
    ) -> None:
        self.address = address
        self.status = status
        context = {"address": address}
        if detail:
            context["detail"] = detail
        super().__init__(
            f"geocoding {address!r} failed with status {status}", context
        )
