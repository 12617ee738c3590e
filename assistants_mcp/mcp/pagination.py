"""
Cursor-based pagination for the MCP list methods.

A cursor is base64(JSON) of {index, total, timestamp}. It is opaque to
clients but not signed: it only spares the server from holding session
state, it is not an access token.
"""

import base64
import binascii
import json
import time
from typing import Any, Sequence

from pydantic import BaseModel, Field, StrictInt, ValidationError

from assistants_mcp.mcp.errors import INTERNAL_ERROR, INVALID_PARAMS, MCPError

DEFAULT_LIMIT = 10
MIN_LIMIT = 1
MAX_LIMIT = 50
CURSOR_TTL_MS = 60 * 60 * 1000


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class PaginationCursor(BaseModel):
    """Position inside a listing at the moment the cursor was issued."""

    index: StrictInt = Field(ge=0)
    total: StrictInt = Field(ge=0)
    timestamp: StrictInt = Field(ge=0)

    model_config = {"frozen": True}

    def is_expired(self, now: int | None = None) -> bool:
        now = now_ms() if now is None else now
        return now - self.timestamp > CURSOR_TTL_MS


class PageResult(BaseModel):
    """One page of a paginated listing."""

    items: list[Any]
    total: int
    hasMore: bool
    nextCursor: str | None = None


def encode_cursor(cursor: PaginationCursor) -> str:
    """Encode a cursor as an opaque string."""
    try:
        payload = json.dumps(cursor.model_dump(), separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise MCPError(
            INTERNAL_ERROR, "Failed to encode pagination cursor", {"error": str(e)}
        ) from e
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_cursor(value: str, now: int | None = None) -> PaginationCursor:
    """
    Decode a cursor string.

    Raises:
        MCPError: INVALID_PARAMS if the cursor is malformed, has the wrong
            shape, or is older than one hour. A cursor past the end of the
            listing decodes normally and selects an empty page.
    """
    try:
        if not isinstance(value, str):
            raise ValueError("cursor must be a string")
        raw = base64.b64decode(value.encode("ascii"), validate=True)
        cursor = PaginationCursor.model_validate(json.loads(raw.decode("utf-8")))
        if cursor.is_expired(now):
            raise ValueError("Cursor has expired")
    except (ValueError, UnicodeError, binascii.Error, ValidationError) as e:
        raise MCPError(
            INVALID_PARAMS,
            "Invalid pagination cursor",
            {
                "cursor": value,
                "error": str(e),
                "hint": "Cursor may be malformed, expired, or from a different listing. "
                "Restart the listing without a cursor.",
            },
        ) from e
    return cursor


def clamp_limit(limit: int | None) -> int:
    """Apply the default and clamp into [MIN_LIMIT, MAX_LIMIT]."""
    if limit is None:
        return DEFAULT_LIMIT
    return max(MIN_LIMIT, min(MAX_LIMIT, limit))


def paginate_array(
    items: Sequence[Any], cursor: str | None = None, limit: int | None = None
) -> PageResult:
    """
    Return the page of items selected by cursor and limit.

    A cursor pointing at or past the end yields an empty final page. The
    next cursor is freshly timestamped on every call.
    """
    total = len(items)
    page_size = clamp_limit(limit)
    start = decode_cursor(cursor).index if cursor else 0

    if start >= total:
        return PageResult(items=[], total=total, hasMore=False)

    end = min(start + page_size, total)
    has_more = end < total
    next_cursor = None
    if has_more:
        next_cursor = encode_cursor(
            PaginationCursor(index=end, total=total, timestamp=now_ms())
        )

    return PageResult(
        items=list(items[start:end]),
        total=total,
        hasMore=has_more,
        nextCursor=next_cursor,
    )


def pagination_summary(result: PageResult, cursor: str | None, limit: int | None) -> dict[str, Any]:
    """Fields worth logging about a served page."""
    return {
        "requested_limit": limit,
        "returned": len(result.items),
        "total": result.total,
        "has_more": result.hasMore,
        "had_cursor": cursor is not None,
    }
