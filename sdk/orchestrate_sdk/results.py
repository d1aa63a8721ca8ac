"""
Result envelopes for the Orchestrate SDK.

Every result the service returns has the same structure: a position (an
item address, or an event position) plus a JSON value. This module models
that as one generic Envelope and parses response bodies into it:
- KVResult: a stored value and the address it was read at
- GraphResult: an item reached through a relation traversal
- Event: a timed event in an item's event bucket
- ListPage / GraphResults / EventResults: result sets

Envelope metadata is parsed when the response arrives. The value stays as
raw JSON bytes until the caller asks for it with decode(), so callers that
only need refs, ordinals or counts never pay for decoding.

Invariants:
    - Envelopes are immutable; a failed decode leaves them untouched
    - ListPage.next is opaque and only ever passed back to the service
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import to_json

from .address import EntityAddress, EventPosition, RelationAddress
from .codec import decode_value
from .errors import PayloadDecodeError

A = TypeVar("A")
E = TypeVar("E", bound="Envelope[Any]")


@dataclass(frozen=True)
class Envelope(Generic[A]):
    """A value plus the position it was read at.

    Attributes:
        address: Where the value lives (EntityAddress or EventPosition)
        raw_value: The value as JSON bytes, not yet decoded
    """

    address: A
    raw_value: bytes = field(repr=False)

    def decode(self, shape: Any = Any) -> Any:
        """Decode the value into shape.

        Example:
            >>> profile = result.decode(UserProfile)

        Raises:
            PayloadDecodeError: If the value does not fit shape
        """
        return decode_value(self.raw_value, shape)

    def value(self) -> Any:
        """Decode the value as plain JSON data."""
        return decode_value(self.raw_value)


class KVResult(Envelope[EntityAddress]):
    """A key/value item; address.ref is the version that was read."""


class GraphResult(Envelope[EntityAddress]):
    """An item reached by following relations."""


class Event(Envelope[EventPosition]):
    """A timed event."""

    @property
    def ordinal(self) -> int:
        return self.address.ordinal

    @property
    def timestamp(self) -> int:
        return self.address.timestamp


@dataclass(frozen=True)
class ResultSet(Generic[E]):
    """An ordered set of envelopes returned by one request."""

    count: int
    results: tuple[E, ...]

    def __iter__(self) -> Iterator[E]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)


@dataclass(frozen=True)
class ListPage(ResultSet[KVResult]):
    """One page of a collection listing.

    Attributes:
        next: Continuation link from the service; None on the last page
    """

    next: Optional[str] = None

    @property
    def has_next(self) -> bool:
        return bool(self.next)


@dataclass(frozen=True)
class GraphResults(ResultSet[GraphResult]):
    """Items reached by a relation traversal."""

    relation: Optional[RelationAddress] = None


@dataclass(frozen=True)
class EventResults(ResultSet[Event]):
    """Events from one item's event bucket, newest first."""


# Wire shapes of the service's JSON bodies.


class _WirePath(BaseModel):
    collection: str
    key: str
    ref: Optional[str] = None


class _WireItem(BaseModel):
    path: _WirePath
    value: Any = None


class _WireEvent(BaseModel):
    ordinal: int
    timestamp: int
    value: Any = None


class _WireList(BaseModel):
    count: Optional[int] = None
    results: list[_WireItem] = []
    next: Optional[str] = None


class _WireEvents(BaseModel):
    count: Optional[int] = None
    results: list[_WireEvent] = []


def _parse(model: type[BaseModel], body: bytes, what: str) -> Any:
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise PayloadDecodeError(f"Malformed {what} response: {e}", shape=model) from e


def _item_address(path: _WirePath) -> EntityAddress:
    return EntityAddress(path.collection, path.key, path.ref or None)


def parse_kv_result(address: EntityAddress, body: bytes) -> KVResult:
    """Wrap a single-value GET body; the bytes are kept exactly as received."""
    return KVResult(address=address, raw_value=bytes(body))


def parse_list_page(body: bytes, next_link: Optional[str] = None) -> ListPage:
    """Parse a collection listing.

    Args:
        body: Response body
        next_link: Continuation link from the Link header, used when the
            body carries none
    """
    wire = _parse(_WireList, body, "list")
    results = tuple(
        KVResult(address=_item_address(item.path), raw_value=to_json(item.value))
        for item in wire.results
    )
    return ListPage(
        count=wire.count if wire.count is not None else len(results),
        results=results,
        next=wire.next or next_link or None,
    )


def parse_graph_results(relation: RelationAddress, body: bytes) -> GraphResults:
    """Parse a relation traversal response."""
    wire = _parse(_WireList, body, "relations")
    results = tuple(
        GraphResult(address=_item_address(item.path), raw_value=to_json(item.value))
        for item in wire.results
    )
    return GraphResults(
        count=wire.count if wire.count is not None else len(results),
        results=results,
        relation=relation,
    )


def parse_event_results(address: EntityAddress, kind: str, body: bytes) -> EventResults:
    """Parse an event bucket response."""
    wire = _parse(_WireEvents, body, "events")
    results = tuple(
        Event(
            address=EventPosition(
                address=address,
                kind=kind,
                timestamp=event.timestamp,
                ordinal=event.ordinal,
            ),
            raw_value=to_json(event.value),
        )
        for event in wire.results
    )
    return EventResults(
        count=wire.count if wire.count is not None else len(results),
        results=results,
    )
