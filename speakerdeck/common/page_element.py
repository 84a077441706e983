"""PageElement: a read-only view over one matched HTML node.

Hook handlers receive a PageElement for every node matching their selector.
It is always backed by static parsed HTML (lxml) and knows which request the
document came from, so handlers can resolve relative links.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lxml import html
from lxml.cssselect import CSSSelector

if TYPE_CHECKING:
    from speakerdeck.common.collector import Request


class PageElement:
    """View over an lxml element matched by a CSS selector.

    Missing text and attributes are returned as empty strings rather than
    None, so handlers can assign them straight into string fields.

    Attributes:
        request: The request of the document this element belongs to.
    """

    def __init__(self, element: html.HtmlElement, request: Request) -> None:
        """Initialize the view.

        Args:
            element: The matched lxml element.
            request: The request of the document the element came from.
        """
        self._element = element
        self.request = request

    def __repr__(self) -> str:
        return f"<PageElement {self.tag_name()} url={self.request.url!r}>"

    @property
    def text(self) -> str:
        """Text content of the element and all its descendants."""
        return self._element.text_content()

    def tag_name(self) -> str:
        """Get the element's tag name.

        Returns:
            Tag name as a lowercase string (e.g., "div", "a").
        """
        return str(self._element.tag).lower()

    def attr(self, name: str) -> str:
        """Extract an attribute value.

        Args:
            name: Name of the attribute.

        Returns:
            Value of the attribute, or "" if it doesn't exist.
        """
        return self._element.get(name) or ""

    def query_css(self, selector: str) -> list[PageElement]:
        """Query descendant elements by CSS selector.

        Args:
            selector: CSS selector expression.

        Returns:
            Matching descendants, in document order.
        """
        return [
            PageElement(match, self.request)
            for match in CSSSelector(selector)(self._element)
            if match is not self._element
        ]

    def child_text(self, selector: str) -> str:
        """Concatenated text of all descendants matching a selector.

        Args:
            selector: CSS selector expression, relative to this element.

        Returns:
            The stripped, concatenated text, or "" when nothing matches.
        """
        texts = [child.text for child in self.query_css(selector)]
        return "".join(texts).strip()

    def child_attr(self, selector: str, name: str) -> str:
        """Attribute of the first descendant matching a selector.

        Args:
            selector: CSS selector expression, relative to this element.
            name: Name of the attribute.

        Returns:
            The stripped attribute value, or "" when nothing matches.
        """
        for child in self.query_css(selector):
            return child.attr(name).strip()
        return ""

    def absolute_url(self, url: str) -> str:
        """Resolve a (possibly relative) URL against the document URL.

        Args:
            url: An href/src value taken from the document.

        Returns:
            The absolute URL, or "" for an empty input.
        """
        if not url:
            return ""
        return self.request.absolute_url(url)
