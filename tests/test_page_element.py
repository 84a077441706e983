"""Tests for PageElement, the node view handed to hook handlers."""

import pytest
from lxml import html
from lxml.cssselect import CSSSelector

from speakerdeck.common.collector import Request
from speakerdeck.common.page_element import PageElement

CARD_HTML = """
<html><body>
<a class="card" href="/alice/looking-glass" title="Through the Looking Glass">
  <div class="deck-preview" data-id=" g7h8i9 "></div>
  <div class="meta"><span>May 21, 2019</span> <span>12</span></div>
  <img src="//cdn.example.com/avatar.png">
</a>
</body></html>
"""


@pytest.fixture
def card() -> PageElement:
    root = html.fromstring(CARD_HTML)
    (node,) = CSSSelector("a.card")(root)
    return PageElement(node, Request(url="https://speakerdeck.com/alice"))


class TestPageElement:
    """Tests for the PageElement accessors."""

    def test_tag_name(self, card: PageElement) -> None:
        assert card.tag_name() == "a"

    def test_attr(self, card: PageElement) -> None:
        """Existing attributes shall be returned, missing ones as ""."""
        assert card.attr("title") == "Through the Looking Glass"
        assert card.attr("data-missing") == ""

    def test_text_includes_descendants(self, card: PageElement) -> None:
        assert "May 21, 2019" in card.text
        assert "12" in card.text

    def test_child_text(self, card: PageElement) -> None:
        """child_text shall strip the text of the matching descendants."""
        assert card.child_text(".meta > :nth-child(1)") == "May 21, 2019"
        assert card.child_text(".nothing") == ""

    def test_child_attr(self, card: PageElement) -> None:
        """child_attr shall strip the attribute of the first match."""
        assert card.child_attr("div.deck-preview", "data-id") == "g7h8i9"
        assert card.child_attr("div.nothing", "data-id") == ""

    def test_query_css_excludes_self(self, card: PageElement) -> None:
        """query_css shall only return descendants."""
        assert card.query_css("a") == []
        assert [e.tag_name() for e in card.query_css("span")] == [
            "span",
            "span",
        ]

    def test_absolute_url(self, card: PageElement) -> None:
        """Relative links shall be resolved against the document URL."""
        assert (
            card.absolute_url(card.attr("href"))
            == "https://speakerdeck.com/alice/looking-glass"
        )
        assert (
            card.absolute_url(card.child_attr("img", "src"))
            == "https://cdn.example.com/avatar.png"
        )
        assert card.absolute_url("") == ""
