"""
Parsing of version identifiers from response headers.

After a write the service answers with a Location header such as
``/v0/users/alice/refs/0eb6b6b1e3bd3b35``; after an unpinned read it sends
Content-Location with the same shape. Event writes answer with
``/v0/users/alice/events/login/1398286518286/6``.

The documented shape is validated from the end of the path: the marker
segment must sit at a fixed distance from the last segment. Leading
components (host, API version) are ignored, so extra or missing prefixes
cannot shift the result onto the wrong segment.
"""

from __future__ import annotations

from urllib.parse import urlsplit

from .address import EVENTS_SEGMENT, REFS_SEGMENT, EntityAddress, EventPosition
from .errors import HeaderParsingError


def _split_at_marker(
    value: str | None,
    header: str,
    marker: str,
    width: int,
) -> tuple[list[str], list[str]]:
    """Split a header path into (segments before marker, width segments after).

    Raises:
        HeaderParsingError: If the header is missing, has no marker, ends
            with the marker, or has a different number of trailing segments
    """
    if not value:
        raise HeaderParsingError(f"{header} header is missing", header=header, value=value)

    segments = [segment for segment in urlsplit(value.strip()).path.split("/") if segment]

    if marker not in segments:
        raise HeaderParsingError(
            f"{header} header has no '{marker}' segment: {value}",
            header=header,
            value=value,
        )
    if segments[-1] == marker:
        raise HeaderParsingError(
            f"{header} header ends with '{marker}': {value}",
            header=header,
            value=value,
        )

    index = len(segments) - width - 1
    if index < 0 or segments[index] != marker:
        raise HeaderParsingError(
            f"{header} header expected {width} segment(s) after '{marker}': {value}",
            header=header,
            value=value,
        )
    return segments[:index], segments[index + 1 :]


def _check_owner(
    leading: list[str],
    address: EntityAddress,
    header: str,
    value: str,
) -> None:
    if leading[-2:] != [address.collection, address.key]:
        raise HeaderParsingError(
            f"{header} header does not point at {address.collection}/{address.key}: {value}",
            header=header,
            value=value,
        )


def extract_ref(
    value: str | None,
    *,
    header: str = "Location",
    expected: EntityAddress | None = None,
) -> str:
    """Return the ref named by a Location or Content-Location header.

    Args:
        value: Header value (absolute URL or path)
        header: Header name, used in error messages
        expected: If given, the collection and key the header must name

    Raises:
        HeaderParsingError: If the header does not end in refs/<ref>, or
            names a different item than expected
    """
    leading, (ref,) = _split_at_marker(value, header, REFS_SEGMENT, 1)
    if expected is not None:
        _check_owner(leading, expected, header, value or "")
    return ref


def extract_event_position(
    value: str | None,
    *,
    address: EntityAddress,
    kind: str,
    header: str = "Location",
) -> EventPosition:
    """Return the position the service assigned to a new event.

    Raises:
        HeaderParsingError: If the header does not end in
            events/<kind>/<timestamp>/<ordinal> for the given item
    """
    leading, (event_kind, timestamp, ordinal) = _split_at_marker(
        value, header, EVENTS_SEGMENT, 3
    )
    _check_owner(leading, address, header, value or "")
    if event_kind != kind:
        raise HeaderParsingError(
            f"{header} header names event type '{event_kind}', expected '{kind}'",
            header=header,
            value=value,
        )
    try:
        return EventPosition(
            address=address,
            kind=kind,
            timestamp=int(timestamp),
            ordinal=int(ordinal),
        )
    except ValueError as e:
        raise HeaderParsingError(
            f"{header} header has a non-numeric timestamp or ordinal: {value}",
            header=header,
            value=value,
        ) from e
