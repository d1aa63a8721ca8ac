"""
Unit tests for result envelopes and response parsing.

Tests cover:
- Lazy decoding into plain JSON, dataclasses and pydantic models
- Decode failures leaving envelopes intact
- List, relation and event body parsing
"""

import json
from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from orchestrate_sdk.address import EntityAddress, RelationAddress
from orchestrate_sdk.errors import PayloadDecodeError
from orchestrate_sdk.results import (
    Event,
    KVResult,
    parse_event_results,
    parse_graph_results,
    parse_kv_result,
    parse_list_page,
)


@dataclass
class Profile:
    name: str
    age: int


class ProfileModel(BaseModel):
    name: str
    age: int


class TestEnvelopeDecode:
    """Tests for Envelope.decode and Envelope.value."""

    @pytest.fixture
    def result(self):
        return parse_kv_result(
            EntityAddress("users", "alice", "abc"),
            b'{"name": "Alice", "age": 30}',
        )

    def test_raw_value_untouched(self, result):
        """Single-value bodies are kept byte for byte."""
        assert result.raw_value == b'{"name": "Alice", "age": 30}'

    def test_value(self, result):
        assert result.value() == {"name": "Alice", "age": 30}

    def test_decode_dataclass(self, result):
        assert result.decode(Profile) == Profile(name="Alice", age=30)

    def test_decode_model(self, result):
        profile = result.decode(ProfileModel)
        assert profile.name == "Alice"
        assert profile.age == 30

    def test_decode_generic(self):
        result = KVResult(address=EntityAddress("nums", "n"), raw_value=b"[1, 2, 3]")
        assert result.decode(list[int]) == [1, 2, 3]

    def test_decode_mismatch(self, result):
        """A shape mismatch raises PayloadDecodeError."""
        with pytest.raises(PayloadDecodeError) as exc_info:
            result.decode(list[int])

        assert exc_info.value.code == "PAYLOAD_DECODE"

    def test_failed_decode_keeps_metadata(self, result):
        """Metadata is intact after a failed decode."""
        with pytest.raises(PayloadDecodeError):
            result.decode(int)

        assert result.address == EntityAddress("users", "alice", "abc")
        assert result.value()["name"] == "Alice"

    def test_invalid_json(self):
        result = KVResult(address=EntityAddress("users", "x"), raw_value=b"{not json")
        with pytest.raises(PayloadDecodeError):
            result.value()


class TestParseListPage:
    """Tests for parse_list_page."""

    def test_page(self):
        body = json.dumps(
            {
                "count": 2,
                "results": [
                    {"path": {"collection": "users", "key": "alice", "ref": "r1"}, "value": {"n": 1}},
                    {"path": {"collection": "users", "key": "bob", "ref": "r2"}, "value": {"n": 2}},
                ],
                "next": "/v0/users?limit=2&afterKey=bob",
            }
        ).encode()

        page = parse_list_page(body)

        assert page.count == 2
        assert len(page) == 2
        assert [r.address.key for r in page] == ["alice", "bob"]
        assert page.results[0].address == EntityAddress("users", "alice", "r1")
        assert page.results[1].value() == {"n": 2}
        assert page.next == "/v0/users?limit=2&afterKey=bob"
        assert page.has_next

    def test_last_page(self):
        body = b'{"count": 0, "results": []}'
        page = parse_list_page(body)

        assert page.count == 0
        assert page.next is None
        assert not page.has_next

    def test_link_header_fallback(self):
        """The Link header continuation is used when the body has none."""
        page = parse_list_page(b'{"count": 0, "results": []}', "/v0/users?limit=2&afterKey=z")
        assert page.next == "/v0/users?limit=2&afterKey=z"

    def test_missing_count_defaults_to_length(self):
        body = b'{"results": [{"path": {"collection": "c", "key": "k"}, "value": 1}]}'
        page = parse_list_page(body)

        assert page.count == 1
        assert page.results[0].address.ref is None

    @pytest.mark.parametrize(
        "body",
        [b"not json", b'{"results": [{"value": 1}]}', b'{"results": "nope"}'],
    )
    def test_malformed(self, body):
        with pytest.raises(PayloadDecodeError):
            parse_list_page(body)


class TestParseGraphResults:
    """Tests for parse_graph_results."""

    def test_results(self):
        relation = RelationAddress(EntityAddress("users", "alice"), ("friends", "colleagues"))
        body = json.dumps(
            {
                "count": 1,
                "results": [
                    {"path": {"collection": "users", "key": "carol", "ref": "r9"}, "value": {"name": "Carol"}}
                ],
            }
        ).encode()

        results = parse_graph_results(relation, body)

        assert results.relation == relation
        assert results.count == 1
        assert results.results[0].address == EntityAddress("users", "carol", "r9")
        assert results.results[0].value() == {"name": "Carol"}


class TestParseEventResults:
    """Tests for parse_event_results."""

    def test_events(self):
        address = EntityAddress("users", "alice")
        body = json.dumps(
            {
                "count": 2,
                "results": [
                    {"ordinal": 7, "timestamp": 1398286518286, "value": {"ip": "10.0.0.2"}},
                    {"ordinal": 6, "timestamp": 1398286518000, "value": {"ip": "10.0.0.1"}},
                ],
            }
        ).encode()

        results = parse_event_results(address, "login", body)

        assert results.count == 2
        first = results.results[0]
        assert isinstance(first, Event)
        assert first.ordinal == 7
        assert first.timestamp == 1398286518286
        assert first.address.kind == "login"
        assert first.address.address == address
        assert first.value() == {"ip": "10.0.0.2"}

    def test_missing_ordinal(self):
        with pytest.raises(PayloadDecodeError):
            parse_event_results(
                EntityAddress("users", "alice"),
                "login",
                b'{"results": [{"timestamp": 1, "value": {}}]}',
            )
