"""
Error types for the Orchestrate SDK.

This module defines all exception types raised by the SDK:
- OrchestrateError: Base exception
- InvalidAddressError / InvalidQueryError: Malformed caller input
- PreconditionConstructionError: Impossible conditional-write request
- TransportError: Network failure below the HTTP layer
- ServiceError: Non-success HTTP response (plus status-specific subclasses)
- HeaderParsingError: Malformed Location / Content-Location / Link header
- PayloadDecodeError / PayloadEncodeError: Payload shape mismatch
- NoMorePagesError: Pagination exhausted

It also holds the error mapper that turns a failed HTTP response into a
ServiceError.

Invariants:
    - All errors inherit from OrchestrateError
    - Input validation errors are raised before any request is sent
    - A ServiceError always carries the HTTP status line, even when the
      response body cannot be decoded
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class OrchestrateError(Exception):
    """Base exception for all Orchestrate SDK errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "ORCHESTRATE_ERROR"
        self.details = details or {}


class InvalidAddressError(OrchestrateError):
    """An entity address or relation path cannot be turned into a URI.

    Raised when:
    - Collection or key is empty
    - A relation traversal has no hops, or an empty hop name
    - An event type is empty
    - A ref-pinned address is used as an unconditional write target
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="INVALID_ADDRESS",
            details={"collection": collection, "key": key},
        )
        self.collection = collection
        self.key = key


class InvalidQueryError(OrchestrateError):
    """List or range query parameters are malformed."""

    def __init__(self, message: str, parameter: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="INVALID_QUERY",
            details={"parameter": parameter},
        )
        self.parameter = parameter


class PreconditionConstructionError(OrchestrateError):
    """The requested write semantics cannot be expressed as headers.

    Raised when:
    - If-Match is requested for an address without a ref
    - If-None-Match is requested for a DELETE
    """

    def __init__(self, message: str, condition: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="PRECONDITION_CONSTRUCTION",
            details={"condition": condition},
        )
        self.condition = condition


class TransportError(OrchestrateError):
    """The HTTP exchange failed before a response was received.

    Raised when:
    - The service is unreachable
    - The connection is reset
    - The transport's timeout elapses
    - The response body cannot be content-decoded
    """

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="TRANSPORT_ERROR",
            details={"method": method, "path": path},
        )
        self.method = method
        self.path = path


class ServiceError(OrchestrateError):
    """The service answered with a non-success status.

    Attributes:
        status_line: HTTP status line, e.g. "412 Precondition Failed"
        status_code: Numeric HTTP status
        message: Message from the error body (may be empty)
        locator: Offending field or resource from the error body (may be empty)
    """

    default_code = "SERVICE_ERROR"

    def __init__(
        self,
        status_line: str,
        message: str = "",
        locator: str = "",
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(
            message,
            code=self.default_code,
            details={
                "status_line": status_line,
                "status_code": status_code,
                "locator": locator,
            },
        )
        self.status_line = status_line
        self.status_code = status_code
        self.locator = locator

    def __str__(self) -> str:
        if self.message:
            return f"{self.status_line}: {self.message}"
        return self.status_line


class AuthenticationError(ServiceError):
    """The API key was rejected (401)."""

    default_code = "UNAUTHORIZED"


class NotFoundError(ServiceError):
    """The addressed item, ref or collection does not exist (404)."""

    default_code = "NOT_FOUND"


class ConflictError(ServiceError):
    """The write conflicts with the current state of the item (409)."""

    default_code = "CONFLICT"


class PreconditionFailedError(ServiceError):
    """An If-Match or If-None-Match precondition was not met (412)."""

    default_code = "PRECONDITION_FAILED"


class HeaderParsingError(OrchestrateError):
    """A response header does not have the documented shape."""

    def __init__(
        self,
        message: str,
        header: Optional[str] = None,
        value: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="HEADER_PARSING",
            details={"header": header, "value": value},
        )
        self.header = header
        self.value = value


class PayloadDecodeError(OrchestrateError):
    """A response body or stored value does not match the requested shape."""

    def __init__(self, message: str, shape: Any = None) -> None:
        super().__init__(
            message,
            code="PAYLOAD_DECODE",
            details={"shape": repr(shape) if shape is not None else None},
        )
        self.shape = shape


class PayloadEncodeError(OrchestrateError):
    """A value could not be serialized to JSON for a write."""

    def __init__(self, message: str, value_type: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="PAYLOAD_ENCODE",
            details={"value_type": value_type},
        )
        self.value_type = value_type


class NoMorePagesError(OrchestrateError):
    """The list page has no continuation link."""

    def __init__(self, message: str = "No more pages in result set") -> None:
        super().__init__(message, code="NO_MORE_PAGES")


class _ErrorBody(BaseModel):
    """Wire shape of the service's error response."""

    message: Optional[str] = None
    locator: Optional[str] = None


_STATUS_ERRORS: Dict[int, type[ServiceError]] = {
    401: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
    412: PreconditionFailedError,
}


def error_from_response(
    status_code: int,
    reason_phrase: str,
    body: bytes,
) -> ServiceError:
    """Map a non-success response to a ServiceError.

    The body is decoded as {message, locator}. If that fails the error is
    still returned, with an empty message and locator.

    Args:
        status_code: HTTP status code
        reason_phrase: HTTP reason phrase
        body: Raw response body

    Returns:
        ServiceError, or the subclass registered for the status code
    """
    status_line = f"{status_code} {reason_phrase}".strip()

    error_body = _ErrorBody()
    if body:
        try:
            error_body = _ErrorBody.model_validate_json(body)
        except ValidationError:
            logger.warning(f"Undecodable error body for {status_line}")

    error_class = _STATUS_ERRORS.get(status_code, ServiceError)
    return error_class(
        status_line,
        message=error_body.message or "",
        locator=error_body.locator or "",
        status_code=status_code,
    )
