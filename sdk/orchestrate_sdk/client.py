"""
Orchestrate Client for Python SDK.

This module provides the main client interface:
- Key/value: get, put (unconditional, if-unmodified, if-absent), delete,
  purge, list with pagination
- Graph: relation traversal and relation creation
- Events: event bucket reads (optionally time-bounded) and event writes

Example:
    >>> async with Client("my-api-key") as db:
    ...     address = await db.put("users", "alice", {"name": "Alice"})
    ...     result = await db.get("users", "alice")
    ...     print(result.address.ref, result.value())

Invariants:
    - One method call performs exactly one HTTP exchange
    - Caller input is validated before any request is sent
    - No retries; every failure is raised to the caller
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

import httpx

from .address import (
    EntityAddress,
    EventPosition,
    RelationAddress,
    resolve_collection,
    resolve_event_bucket,
    resolve_read,
    resolve_relation,
    resolve_relation_write,
    resolve_write,
)
from .codec import encode_value
from .conditional import WriteCondition, precondition_headers
from .config import ClientConfig
from .errors import InvalidAddressError, InvalidQueryError
from .pagination import build_list_params, next_page_target, parse_link_header
from .refs import extract_event_position, extract_ref
from .results import (
    EventResults,
    GraphResults,
    KVResult,
    ListPage,
    parse_event_results,
    parse_graph_results,
    parse_kv_result,
    parse_list_page,
)
from ._http_client import HttpResponse, HttpTransport

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 10


def _to_millis(value: int | datetime, name: str) -> int:
    """Convert an event time to milliseconds since the epoch."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise InvalidQueryError(f"{name} must be timezone-aware", name)
        return int(value.timestamp() * 1000)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQueryError(f"{name} must be int milliseconds or datetime, got {value!r}", name)
    return value


class Client:
    """Client for the Orchestrate REST API.

    Holds an immutable ClientConfig and an HTTP connection pool. Safe to
    share between concurrent tasks: every call builds its own request and
    reads its own response.

    Example:
        >>> async with Client(config=ClientConfig.from_env()) as db:
        ...     page = await db.list("users", limit=50)
        ...     while page.has_next:
        ...         page = await db.list_next(page)
    """

    def __init__(
        self,
        auth_token: str | None = None,
        *,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            auth_token: API key; ignored when config is given
            config: Full client configuration
            transport: Optional httpx transport, for tests or custom pooling
        """
        if config is None:
            if not auth_token:
                raise ValueError("Either auth_token or config is required")
            config = ClientConfig(auth_token=auth_token)

        self._config = config
        self._http = HttpTransport(config, transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def connect(self) -> None:
        """Open the connection pool."""
        await self._http.connect()

    async def close(self) -> None:
        """Close the connection pool."""
        await self._http.close()

    async def __aenter__(self) -> Client:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # Key/value

    async def get(self, collection: str, key: str, ref: str | None = None) -> KVResult:
        """Get the value of a collection-key pair.

        Args:
            collection: Collection name
            key: Item key
            ref: Optional version to read; latest when omitted

        Returns:
            KVResult whose address carries the ref that was read
        """
        return await self.get_path(EntityAddress(collection, key, ref))

    async def get_path(self, address: EntityAddress) -> KVResult:
        """Get the value at an address.

        When the address has no ref, the ref of the latest version is taken
        from the response's Content-Location header.

        Raises:
            InvalidAddressError: If collection or key is empty
            NotFoundError: If the item or ref does not exist
            HeaderParsingError: If Content-Location is missing or malformed
        """
        response = await self._http.request("GET", resolve_read(address), expect=200)

        if not address.ref:
            ref = extract_ref(
                response.headers.get("Content-Location"),
                header="Content-Location",
                expected=address,
            )
            address = address.with_ref(ref)

        return parse_kv_result(address, response.body)

    async def put(self, collection: str, key: str, value: Any) -> EntityAddress:
        """Store a value, replacing whatever the key holds.

        Returns:
            Address of the new version
        """
        return await self.put_raw(collection, key, encode_value(value))

    async def put_raw(self, collection: str, key: str, body: bytes) -> EntityAddress:
        """Store pre-encoded JSON, replacing whatever the key holds."""
        return await self.write(EntityAddress(collection, key), body)

    async def put_if_unmodified(self, address: EntityAddress, value: Any) -> EntityAddress:
        """Store a value only if address.ref is still the latest version.

        Raises:
            PreconditionConstructionError: If address has no ref
            PreconditionFailedError: If the item has changed since address.ref
        """
        return await self.put_if_unmodified_raw(address, encode_value(value))

    async def put_if_unmodified_raw(self, address: EntityAddress, body: bytes) -> EntityAddress:
        """Store pre-encoded JSON only if address.ref is still the latest version."""
        return await self.write(address, body, WriteCondition.IF_MATCH)

    async def put_if_absent(self, collection: str, key: str, value: Any) -> EntityAddress:
        """Store a value only if the key holds nothing yet.

        Raises:
            PreconditionFailedError: If the key already holds a value
        """
        return await self.put_if_absent_raw(collection, key, encode_value(value))

    async def put_if_absent_raw(self, collection: str, key: str, body: bytes) -> EntityAddress:
        """Store pre-encoded JSON only if the key holds nothing yet."""
        return await self.write(EntityAddress(collection, key), body, WriteCondition.IF_ABSENT)

    async def write(
        self,
        address: EntityAddress,
        body: bytes,
        condition: WriteCondition = WriteCondition.UNCONDITIONAL,
        *,
        discard_ref: bool = False,
    ) -> EntityAddress:
        """Store pre-encoded JSON at an address under the given condition.

        An address pinned to a ref is read-only context: it can be used as
        the If-Match source, but an unconditional write to it is refused
        unless discard_ref is set.

        Args:
            address: Target item; ref is only used for If-Match
            body: JSON request body
            condition: Write semantics
            discard_ref: Allow an unconditional write to a pinned address

        Returns:
            Address of the new version, with the ref from Location
        """
        if condition is WriteCondition.UNCONDITIONAL and address.ref and not discard_ref:
            raise InvalidAddressError(
                f"Address {address.collection}/{address.key} is pinned to ref "
                f"'{address.ref}'; use IF_MATCH or pass discard_ref=True",
                collection=address.collection,
                key=address.key,
            )

        headers = precondition_headers(condition, address)
        response = await self._http.request(
            "PUT",
            resolve_write(address),
            expect=201,
            headers=headers,
            body=body,
        )

        ref = extract_ref(response.headers.get("Location"), header="Location", expected=address)
        logger.debug(f"Stored {address.collection}/{address.key} at ref {ref}")
        return EntityAddress(address.collection, address.key, ref)

    async def delete(self, collection: str, key: str) -> None:
        """Delete the value held at a collection-key pair."""
        address = EntityAddress(collection, key)
        await self._http.request("DELETE", resolve_write(address), expect=204)

    async def delete_if_unmodified(self, address: EntityAddress) -> None:
        """Delete the value only if address.ref is still the latest version.

        Raises:
            PreconditionConstructionError: If address has no ref
            PreconditionFailedError: If the item has changed since address.ref
        """
        headers = precondition_headers(WriteCondition.IF_MATCH, address, method="DELETE")
        await self._http.request(
            "DELETE",
            resolve_write(address),
            expect=204,
            headers=headers,
        )

    async def purge(self, collection: str, key: str) -> None:
        """Delete the current and all previous values of a collection-key pair."""
        address = EntityAddress(collection, key)
        await self._http.request(
            "DELETE",
            resolve_write(address),
            expect=204,
            params={"purge": "true"},
        )

    async def delete_collection(self, collection: str) -> None:
        """Delete a collection and everything in it."""
        await self._http.request(
            "DELETE",
            resolve_collection(collection),
            expect=204,
            params={"force": "true"},
        )

    async def list(
        self,
        collection: str,
        limit: int = DEFAULT_LIST_LIMIT,
        *,
        after_key: str | None = None,
        start_key: str | None = None,
    ) -> ListPage:
        """List values in key order.

        Args:
            collection: Collection name
            limit: Page size
            after_key: Start after this key (exclusive)
            start_key: Start at this key (inclusive)

        Raises:
            InvalidQueryError: If limit is not positive, or both keys are given
        """
        params = build_list_params(limit, after_key=after_key, start_key=start_key)
        response = await self._http.request(
            "GET",
            resolve_collection(collection),
            expect=200,
            params=params,
        )
        return self._list_page(response)

    async def list_next(self, page: ListPage) -> ListPage:
        """Get the page that follows page.

        Raises:
            NoMorePagesError: If page is the last page; no request is sent
        """
        target = next_page_target(page, self._config.root_path)
        response = await self._http.request("GET", target, expect=200)
        return self._list_page(response)

    def _list_page(self, response: HttpResponse) -> ListPage:
        return parse_list_page(response.body, parse_link_header(response.headers.get("Link")))

    # Graph

    async def get_relations(
        self,
        collection: str,
        key: str,
        hops: Sequence[str],
    ) -> GraphResults:
        """Get the items reached from collection/key by following hops in order.

        Example:
            >>> results = await db.get_relations("users", "alice", ["friends", "colleagues"])
        """
        source = EntityAddress(collection, key)
        hops = (hops,) if isinstance(hops, str) else tuple(hops)
        path = resolve_relation(source, hops)
        response = await self._http.request("GET", path, expect=200)
        return parse_graph_results(RelationAddress(source, hops), response.body)

    async def put_relation(
        self,
        source_collection: str,
        source_key: str,
        kind: str,
        sink_collection: str,
        sink_key: str,
    ) -> None:
        """Create a relation of type kind from one item to another."""
        path = resolve_relation_write(
            EntityAddress(source_collection, source_key),
            kind,
            EntityAddress(sink_collection, sink_key),
        )
        await self._http.request("PUT", path, expect=204)

    # Events

    async def get_events(
        self,
        collection: str,
        key: str,
        kind: str,
        *,
        start: int | datetime | None = None,
        end: int | datetime | None = None,
    ) -> EventResults:
        """Get events of one type attached to an item.

        Args:
            collection: Collection name
            key: Item key
            kind: Event type
            start: Earliest event time (ms since epoch or aware datetime)
            end: Latest event time

        Raises:
            InvalidQueryError: If a bound is malformed or start is after end
        """
        address = EntityAddress(collection, key)
        path = resolve_event_bucket(address, kind)

        params: dict[str, str] = {}
        start_ms = _to_millis(start, "start") if start is not None else None
        end_ms = _to_millis(end, "end") if end is not None else None
        if start_ms is not None and end_ms is not None and start_ms > end_ms:
            raise InvalidQueryError(f"start ({start_ms}) is after end ({end_ms})", "start")
        if start_ms is not None:
            params["start"] = str(start_ms)
        if end_ms is not None:
            params["end"] = str(end_ms)

        response = await self._http.request(
            "GET",
            path,
            expect=200,
            params=params or None,
        )
        return parse_event_results(address, kind, response.body)

    async def put_event(
        self,
        collection: str,
        key: str,
        kind: str,
        value: Any,
        *,
        timestamp: int | datetime | None = None,
    ) -> EventPosition | None:
        """Append an event of type kind to an item.

        Returns:
            The position the service assigned, or None when the response
            does not report one
        """
        return await self.put_event_raw(
            collection, key, kind, encode_value(value), timestamp=timestamp
        )

    async def put_event_raw(
        self,
        collection: str,
        key: str,
        kind: str,
        body: bytes,
        *,
        timestamp: int | datetime | None = None,
    ) -> EventPosition | None:
        """Append a pre-encoded JSON event of type kind to an item."""
        address = EntityAddress(collection, key)
        path = resolve_event_bucket(address, kind)
        params = None
        if timestamp is not None:
            params = {"timestamp": str(_to_millis(timestamp, "timestamp"))}

        response = await self._http.request(
            "PUT",
            path,
            expect=204,
            params=params,
            body=body,
        )

        location = response.headers.get("Location")
        if location is None:
            return None
        return extract_event_position(location, address=address, kind=kind)
