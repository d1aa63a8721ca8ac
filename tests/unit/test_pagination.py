"""
Unit tests for list pagination.

Tests cover:
- First-page query parameters and their validation
- Link header parsing
- Stripping the API root from continuation links
- Exhausted pages
"""

import pytest

from orchestrate_sdk.errors import HeaderParsingError, InvalidQueryError, NoMorePagesError
from orchestrate_sdk.pagination import (
    build_list_params,
    next_page_target,
    parse_link_header,
    strip_link_prefix,
)
from orchestrate_sdk.results import ListPage


class TestBuildListParams:
    """Tests for build_list_params."""

    def test_limit_only(self):
        assert build_list_params(10) == {"limit": "10"}

    def test_after_key(self):
        assert build_list_params(5, after_key="bob") == {"limit": "5", "afterKey": "bob"}

    def test_start_key(self):
        assert build_list_params(5, start_key="bob") == {"limit": "5", "startKey": "bob"}

    def test_both_keys_rejected(self):
        """afterKey and startKey are mutually exclusive."""
        with pytest.raises(InvalidQueryError):
            build_list_params(5, after_key="a", start_key="b")

    @pytest.mark.parametrize("limit", [0, -1, True, 2.5, "10", None])
    def test_invalid_limit(self, limit):
        """Only positive integers are valid limits."""
        with pytest.raises(InvalidQueryError) as exc_info:
            build_list_params(limit)

        assert exc_info.value.parameter == "limit"

    def test_large_limit_passed_through(self):
        """The service enforces its own maximum."""
        assert build_list_params(10_000) == {"limit": "10000"}


class TestParseLinkHeader:
    """Tests for parse_link_header."""

    def test_next(self):
        value = '</v0/users?limit=10&afterKey=bob>; rel="next"'
        assert parse_link_header(value) == "/v0/users?limit=10&afterKey=bob"

    def test_unquoted_rel(self):
        assert parse_link_header("</v0/users?limit=10>; rel=next") == "/v0/users?limit=10"

    def test_picks_next_among_several(self):
        value = '</v0/users?limit=10&beforeKey=a>; rel="prev", </v0/users?limit=10&afterKey=z>; rel="next"'
        assert parse_link_header(value) == "/v0/users?limit=10&afterKey=z"

    @pytest.mark.parametrize("value", [None, "", '</v0/users?limit=10>; rel="prev"'])
    def test_no_next(self, value):
        assert parse_link_header(value) is None


class TestStripLinkPrefix:
    """Tests for strip_link_prefix."""

    def test_bare_path(self):
        """The API root is removed, the query is kept verbatim."""
        link = "/v0/users?limit=10&afterKey=bob"
        assert strip_link_prefix(link, "/v0/") == "users?limit=10&afterKey=bob"

    def test_link_header_entry(self):
        """The <...>; rel="next" wrapper is removed."""
        link = '</v0/users?limit=10&afterKey=bob>; rel="next"'
        assert strip_link_prefix(link, "/v0/") == "users?limit=10&afterKey=bob"

    def test_absolute_url(self):
        link = "https://api.orchestrate.io/v0/users?limit=10&afterKey=bob"
        assert strip_link_prefix(link, "/v0/") == "users?limit=10&afterKey=bob"

    def test_longer_root(self):
        """The prefix comes from the configured root, not a fixed length."""
        link = "/proxy/orchestrate/v0/users?limit=10&afterKey=bob"
        assert strip_link_prefix(link, "/proxy/orchestrate/v0/") == "users?limit=10&afterKey=bob"

    def test_encoded_query_untouched(self):
        link = "/v0/users?limit=10&afterKey=a%20b%2Fc"
        assert strip_link_prefix(link, "/v0/") == "users?limit=10&afterKey=a%20b%2Fc"

    def test_outside_root_rejected(self):
        with pytest.raises(HeaderParsingError):
            strip_link_prefix("/v1/users?limit=10", "/v0/")

    def test_unterminated_wrapper_rejected(self):
        with pytest.raises(HeaderParsingError):
            strip_link_prefix("</v0/users?limit=10", "/v0/")

    def test_root_only_rejected(self):
        with pytest.raises(HeaderParsingError):
            strip_link_prefix("/v0/", "/v0/")


class TestNextPageTarget:
    """Tests for next_page_target."""

    def test_next_target(self):
        page = ListPage(count=1, results=(), next="/v0/users?limit=1&afterKey=alice")
        assert next_page_target(page, "/v0/") == "users?limit=1&afterKey=alice"

    @pytest.mark.parametrize("next_link", [None, ""])
    def test_exhausted(self, next_link):
        """A page without a continuation raises NoMorePagesError."""
        page = ListPage(count=0, results=(), next=next_link)

        assert not page.has_next
        with pytest.raises(NoMorePagesError):
            next_page_target(page, "/v0/")
