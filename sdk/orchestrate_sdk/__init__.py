"""
Orchestrate Python SDK - Client library for the Orchestrate database service.

This SDK maps key/value, graph and event operations onto the Orchestrate
REST API:
- Client for issuing requests
- EntityAddress for naming items and their versions (refs)
- WriteCondition for optimistic concurrency (If-Match / If-None-Match)
- Result envelopes with lazy value decoding

Example:
    >>> from orchestrate_sdk import Client
    >>>
    >>> async with Client("my-api-key") as db:
    ...     address = await db.put("users", "alice", {"name": "Alice"})
    ...     result = await db.get("users", "alice")
    ...     await db.put_if_unmodified(result.address, {"name": "Alice B."})
    ...     await db.put_relation("users", "alice", "friends", "users", "bob")
    ...     await db.put_event("users", "alice", "login", {"ip": "10.0.0.1"})

Invariants:
    - One call performs one HTTP exchange; no retries, no caching
    - Refs are assigned by the service and never reused

Version: 1.0.0
"""

__version__ = "1.0.0"

from .address import EntityAddress, EventPosition, RelationAddress
from .client import Client
from .conditional import WriteCondition
from .config import ClientConfig
from .errors import (
    AuthenticationError,
    ConflictError,
    HeaderParsingError,
    InvalidAddressError,
    InvalidQueryError,
    NoMorePagesError,
    NotFoundError,
    OrchestrateError,
    PayloadDecodeError,
    PayloadEncodeError,
    PreconditionConstructionError,
    PreconditionFailedError,
    ServiceError,
    TransportError,
)
from .results import (
    Envelope,
    Event,
    EventResults,
    GraphResult,
    GraphResults,
    KVResult,
    ListPage,
)

__all__ = [
    # Version
    "__version__",
    # Client
    "Client",
    "ClientConfig",
    "WriteCondition",
    # Addresses
    "EntityAddress",
    "RelationAddress",
    "EventPosition",
    # Results
    "Envelope",
    "KVResult",
    "ListPage",
    "GraphResult",
    "GraphResults",
    "Event",
    "EventResults",
    # Errors
    "OrchestrateError",
    "InvalidAddressError",
    "InvalidQueryError",
    "PreconditionConstructionError",
    "TransportError",
    "ServiceError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "PreconditionFailedError",
    "HeaderParsingError",
    "PayloadDecodeError",
    "PayloadEncodeError",
    "NoMorePagesError",
]
