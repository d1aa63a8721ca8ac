"""
Conditional write headers.

Maps the caller's write semantics onto HTTP preconditions. The service
quotes refs as entity tags, so refs are wrapped in double quotes verbatim.
"""

from __future__ import annotations

from enum import Enum

from .address import EntityAddress
from .errors import PreconditionConstructionError


class WriteCondition(Enum):
    """Supported write semantics."""

    UNCONDITIONAL = "unconditional"
    IF_ABSENT = "if_absent"
    IF_MATCH = "if_match"


def precondition_headers(
    condition: WriteCondition,
    address: EntityAddress | None = None,
    *,
    method: str = "PUT",
) -> dict[str, str]:
    """Build the precondition headers for a write.

    Args:
        condition: Desired write semantics
        address: Address carrying the expected ref (IF_MATCH only)
        method: HTTP method of the write

    Returns:
        Headers to attach; empty for unconditional writes

    Raises:
        PreconditionConstructionError: If IF_MATCH has no ref to match, or
            IF_ABSENT is requested for a DELETE
    """
    if condition is WriteCondition.UNCONDITIONAL:
        return {}

    if condition is WriteCondition.IF_ABSENT:
        if method.upper() == "DELETE":
            raise PreconditionConstructionError(
                "If-None-Match cannot be applied to a delete",
                condition=condition.value,
            )
        return {"If-None-Match": '"*"'}

    if address is None or not address.ref:
        raise PreconditionConstructionError(
            "If-Match requires an address with a ref",
            condition=condition.value,
        )
    return {"If-Match": f'"{address.ref}"'}
