from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..models.attribute import ResolvedAttribute
from ..shopify import queries
from ..shopify.client import MalformedResponseError, TransportError
from .resolver import AdminTransport

"""Attribute writer: one metafieldsSet upsert per row.

Outcomes:
- transport / protocol failure -> failed, "Mutation error: <error>"
- userErrors reported -> failed, JSON-serialized userErrors
- otherwise -> written
"""

logger = logging.getLogger(__name__)

__all__ = [
    "WriteResult",
    "write_attributes",
]


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    message: str | None = None
    error_type: str | None = None  # MUTATION_ERROR / USER_ERRORS

    @staticmethod
    def written() -> WriteResult:
        return WriteResult(ok=True)


def write_attributes(client: AdminTransport, attributes: Sequence[ResolvedAttribute]) -> WriteResult:
    """Upsert all attributes of one owner in a single call.

    Raises:
        ValueError: attributes is empty (callers classify such rows skipped)
    """
    if not attributes:
        raise ValueError("write_attributes requires at least one attribute")

    payload = [a.to_input() for a in attributes]
    try:
        data = client.request(queries.METAFIELDS_SET, {"metafields": payload})
        result = data.get("metafieldsSet")
        if not isinstance(result, dict):
            raise MalformedResponseError("metafieldsSet: missing payload")
    except TransportError as e:
        return WriteResult(ok=False, message=f"Mutation error: {e}", error_type="MUTATION_ERROR")

    user_errors = result.get("userErrors") or []
    if user_errors:
        return WriteResult(
            ok=False,
            message=json.dumps(user_errors, ensure_ascii=False),
            error_type="USER_ERRORS",
        )
    return WriteResult.written()
