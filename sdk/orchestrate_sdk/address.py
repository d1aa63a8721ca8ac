"""
Addresses and URI path construction for the Orchestrate SDK.

This module provides the address types used across the key/value, graph
and event APIs, and the functions that turn them into request paths:
- EntityAddress: collection/key with an optional ref
- RelationAddress: a source item plus an ordered list of relation hops
- EventPosition: one event inside an (item, event type) bucket

Paths are relative to the API root and are not percent-encoded; inputs
must already be path-safe.

Invariants:
    - collection and key are never empty in a built path
    - Writes target the live slot (collection/key); the service assigns refs
    - A ref, once assigned, identifies exactly one historical write
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .errors import InvalidAddressError

REFS_SEGMENT = "refs"
RELATIONS_SEGMENT = "relations"
RELATION_SEGMENT = "relation"
EVENTS_SEGMENT = "events"


@dataclass(frozen=True)
class EntityAddress:
    """Identifies a value in a collection.

    Attributes:
        collection: Collection name
        key: Item key
        ref: Version token; None means the latest version
    """

    collection: str
    key: str
    ref: str | None = None

    def with_ref(self, ref: str | None) -> EntityAddress:
        """Return the same item pinned to another ref."""
        return EntityAddress(self.collection, self.key, ref)

    @property
    def is_pinned(self) -> bool:
        """True when the address names one historical write."""
        return bool(self.ref)


@dataclass(frozen=True)
class RelationAddress:
    """A graph traversal starting at source and following hops in order."""

    source: EntityAddress
    hops: tuple[str, ...]


@dataclass(frozen=True)
class EventPosition:
    """Position of an event in its bucket.

    Attributes:
        address: Item the event belongs to
        kind: Event type
        timestamp: Event time in milliseconds since the epoch
        ordinal: Service-assigned sequence number within the timestamp
    """

    address: EntityAddress
    kind: str
    timestamp: int
    ordinal: int


def _validate(address: EntityAddress) -> None:
    if not address.collection:
        raise InvalidAddressError(
            "collection cannot be empty",
            collection=address.collection,
            key=address.key,
        )
    if not address.key:
        raise InvalidAddressError(
            f"key cannot be empty (collection '{address.collection}')",
            collection=address.collection,
            key=address.key,
        )


def resolve_collection(collection: str) -> str:
    """Path of a whole collection."""
    if not collection:
        raise InvalidAddressError("collection cannot be empty", collection=collection)
    return collection


def resolve_read(address: EntityAddress) -> str:
    """Path for reading a value.

    Returns collection/key/refs/ref when the address is pinned, otherwise
    collection/key.

    Raises:
        InvalidAddressError: If collection or key is empty
    """
    _validate(address)
    if address.ref:
        return f"{address.collection}/{address.key}/{REFS_SEGMENT}/{address.ref}"
    return f"{address.collection}/{address.key}"


def resolve_write(address: EntityAddress) -> str:
    """Path for writing or deleting a value; the ref is never part of it."""
    _validate(address)
    return f"{address.collection}/{address.key}"


def resolve_relation(source: EntityAddress, hops: Sequence[str]) -> str:
    """Path for a multi-hop relation read.

    Example:
        >>> resolve_relation(EntityAddress("users", "alice"), ["friends", "colleagues"])
        'users/alice/relations/friends/colleagues'

    Raises:
        InvalidAddressError: If the source is invalid, hops is empty, or
            any hop is empty
    """
    _validate(source)
    hops = (hops,) if isinstance(hops, str) else tuple(hops)
    if not hops:
        raise InvalidAddressError(
            "relation traversal needs at least one hop",
            collection=source.collection,
            key=source.key,
        )
    if not all(hops):
        raise InvalidAddressError(
            f"relation hops cannot be empty: {list(hops)}",
            collection=source.collection,
            key=source.key,
        )
    return f"{source.collection}/{source.key}/{RELATIONS_SEGMENT}/" + "/".join(hops)


def resolve_relation_write(source: EntityAddress, kind: str, sink: EntityAddress) -> str:
    """Path for creating one relation of type kind from source to sink."""
    _validate(source)
    _validate(sink)
    if not kind:
        raise InvalidAddressError(
            "relation kind cannot be empty",
            collection=source.collection,
            key=source.key,
        )
    return (
        f"{source.collection}/{source.key}/{RELATION_SEGMENT}/{kind}/"
        f"{sink.collection}/{sink.key}"
    )


def resolve_event_bucket(address: EntityAddress, kind: str) -> str:
    """Path of the events of one type attached to an item."""
    _validate(address)
    if not kind:
        raise InvalidAddressError(
            "event type cannot be empty",
            collection=address.collection,
            key=address.key,
        )
    return f"{address.collection}/{address.key}/{EVENTS_SEGMENT}/{kind}"
