"""
Pagination of collection listings.

A listing is requested with a page size and an optional key to start at or
after. Each page may carry a continuation link, either as the body's
``next`` field (``/v0/users?limit=10&afterKey=bob``) or as an RFC 8288
``Link: </v0/users?limit=10&afterKey=bob>; rel="next"`` header. The link is
opaque: the only thing done with it is removing the API root it is
expressed against, so it can be sent back relative to the client's base
URL.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from .errors import HeaderParsingError, InvalidQueryError, NoMorePagesError
from .results import ListPage

_LINK_PART = re.compile(r'<([^>]*)>\s*((?:;\s*[^,;]+)*)')
_REL_NEXT = re.compile(r';\s*rel\s*=\s*"?([^";]*)"?')


def build_list_params(
    limit: int,
    after_key: str | None = None,
    start_key: str | None = None,
) -> dict[str, str]:
    """Build query parameters for the first page of a listing.

    Limits above the service's maximum are passed through; the service
    enforces its own ceiling.

    Raises:
        InvalidQueryError: If limit is not a positive integer, or both
            after_key and start_key are given
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidQueryError(f"limit must be a positive integer, got {limit!r}", "limit")
    if after_key is not None and start_key is not None:
        raise InvalidQueryError("afterKey and startKey are mutually exclusive", "afterKey")

    params = {"limit": str(limit)}
    if after_key is not None:
        params["afterKey"] = after_key
    elif start_key is not None:
        params["startKey"] = start_key
    return params


def parse_link_header(value: str | None) -> str | None:
    """Return the target of the rel="next" entry of a Link header, if any."""
    if not value:
        return None
    for match in _LINK_PART.finditer(value):
        target, params = match.groups()
        for rel in _REL_NEXT.findall(params):
            if "next" in rel.split():
                return target
    return None


def strip_link_prefix(link: str, root_path: str) -> str:
    """Turn a continuation link into a path relative to the API root.

    Accepts the bare form (``/v0/users?limit=10``), an absolute URL, or a
    Link-header entry (``</v0/users?limit=10>; rel="next"``). The query
    string is returned unchanged.

    Raises:
        HeaderParsingError: If the link is not under root_path
    """
    target = link.strip()
    if target.startswith("<"):
        end = target.find(">")
        if end == -1:
            raise HeaderParsingError(f"Unterminated link: {link}", header="Link", value=link)
        target = target[1:end]

    parts = urlsplit(target)
    if not parts.path.startswith(root_path):
        raise HeaderParsingError(
            f"Continuation link is not under {root_path}: {link}",
            header="Link",
            value=link,
        )

    relative = parts.path[len(root_path) :]
    if not relative:
        raise HeaderParsingError(
            f"Continuation link names no collection: {link}",
            header="Link",
            value=link,
        )
    if parts.query:
        relative = f"{relative}?{parts.query}"
    return relative


def next_page_target(page: ListPage, root_path: str) -> str:
    """Return the request path for the page after page.

    Raises:
        NoMorePagesError: If page has no continuation link
        HeaderParsingError: If the link is not in the documented format
    """
    if not page.has_next:
        raise NoMorePagesError()
    return strip_link_prefix(page.next or "", root_path)
