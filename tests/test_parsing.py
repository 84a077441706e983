"""Tests for the text parsing helpers."""

import locale
from collections.abc import Generator
from datetime import datetime, timezone

import pytest

from speakerdeck.common.parsing import (
    MONTH_NAMES,
    find_links,
    last_path_segment,
    parse_date,
    parse_number,
)


@pytest.fixture
def german_time_locale() -> Generator[None, None, None]:
    """Switch LC_TIME to German for one test, if the locale is installed."""
    previous = locale.setlocale(locale.LC_TIME)
    try:
        locale.setlocale(locale.LC_TIME, "de_DE.UTF-8")
    except locale.Error:
        pytest.skip("de_DE.UTF-8 locale not available")
    yield
    locale.setlocale(locale.LC_TIME, previous)


class TestParseDate:
    """Tests for parse_date."""

    def test_long_month_name(self) -> None:
        """Long month names with a comma shall be parsed to UTC midnight."""
        assert parse_date("March 03, 2018") == datetime(
            2018, 3, 3, tzinfo=timezone.utc
        )

    def test_abbreviated_month_name(self) -> None:
        """Abbreviated month names shall be parsed as well."""
        assert parse_date("Jul 4, 2021") == datetime(
            2021, 7, 4, tzinfo=timezone.utc
        )

    def test_surrounding_whitespace_and_newlines(self) -> None:
        """Indentation and newlines around the date shall be ignored."""
        assert parse_date("\n    May 21, 2019\n  ") == datetime(
            2019, 5, 21, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("month", range(1, 13))
    def test_every_month(self, month: int) -> None:
        """Full and short English month names shall map to the month."""
        name = MONTH_NAMES[month - 1]
        expected = datetime(2020, month, 9, tzinfo=timezone.utc)

        assert parse_date(f"{name} 09, 2020") == expected
        assert parse_date(f"{name[:3]} 9, 2020") == expected

    def test_independent_of_locale(self, german_time_locale: None) -> None:
        """English dates shall parse under a non-English LC_TIME."""
        assert parse_date("December 01, 2017") == datetime(
            2017, 12, 1, tzinfo=timezone.utc
        )

    def test_unknown_month_name(self) -> None:
        with pytest.raises(ValueError, match="unrecognized date"):
            parse_date("Dezember 01, 2017")

    def test_invalid_day(self) -> None:
        with pytest.raises(ValueError):
            parse_date("February 30, 2021")

    def test_unrecognized_date(self) -> None:
        """Text matching no format shall raise ValueError."""
        with pytest.raises(ValueError, match="unrecognized date"):
            parse_date("sometime last spring")


class TestParseNumber:
    """Tests for parse_number."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("42", 42),
            (" 7 \n", 7),
            ("1,024", 1024),
            ("2.5k", 2500),
            ("1k", 1000),
            ("", 0),
            ("   ", 0),
        ],
    )
    def test_counters(self, text: str, expected: int) -> None:
        """Counters shall be parsed with thousands separators and k."""
        assert parse_number(text) == expected

    def test_fraction_is_truncated(self) -> None:
        """Fractional values shall be truncated, not rounded."""
        assert parse_number("3.9") == 3

    def test_not_a_number(self) -> None:
        """Non-numeric text shall raise ValueError."""
        with pytest.raises(ValueError):
            parse_number("many")


class TestFindLinks:
    """Tests for find_links."""

    def test_finds_every_link(self) -> None:
        """Every http and https link in the text shall be returned."""
        text = (
            "Slides: https://example.com/a and http://example.org/b#c\n"
            "Code: https://github.com/alice/glass"
        )
        assert find_links(text) == [
            "https://example.com/a",
            "http://example.org/b#c",
            "https://github.com/alice/glass",
        ]

    def test_link_stops_at_unsupported_character(self) -> None:
        """A link shall end at the first character outside the URL set."""
        assert find_links("see https://example.com/x?y=1.") == [
            "https://example.com/x"
        ]

    def test_no_links(self) -> None:
        """Text without links shall give an empty list."""
        assert find_links("no links here") == []


class TestLastPathSegment:
    """Tests for last_path_segment."""

    def test_talk_url(self) -> None:
        assert (
            last_path_segment("https://speakerdeck.com/alice/looking-glass")
            == "looking-glass"
        )

    def test_trailing_slash_and_query(self) -> None:
        assert last_path_segment("https://speakerdeck.com/alice/?page=2") == (
            "alice"
        )
