"""
Per-source pagination cursors.

Each upstream speaks a different pagination dialect, so each gets its own
cursor type. A cursor belongs to exactly one source type; adapters check the
type of the cursor they are handed and raise `CursorTypeError` on a mismatch.

Shapes:
- PageCursor:    page number + page size (internal store, exact totals)
- TokenCursor:   opaque provider token (Workable)
- OffsetCursor:  offset + limit (SmartRecruiters)
- HasMoreCursor: next page index for a provider that only says "there is more"
                 (Hiring.cafe)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Union


class CursorTypeError(TypeError):
    """Raised when a cursor is handed to a source that uses a different cursor type."""


@dataclass(frozen=True)
class PageCursor:
    page: int
    page_size: int

    kind: ClassVar[str] = "page"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "page": self.page, "page_size": self.page_size}


@dataclass(frozen=True)
class TokenCursor:
    token: str

    kind: ClassVar[str] = "token"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "token": self.token}


@dataclass(frozen=True)
class OffsetCursor:
    offset: int
    limit: int

    kind: ClassVar[str] = "offset"

    def next_after(self, total: int) -> OffsetCursor | None:
        """Cursor for the following page, or None once ``offset + limit`` reaches ``total``."""
        next_offset = self.offset + self.limit
        if next_offset < total:
            return OffsetCursor(offset=next_offset, limit=self.limit)
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "offset": self.offset, "limit": self.limit}


@dataclass(frozen=True)
class HasMoreCursor:
    page: int

    kind: ClassVar[str] = "has_more"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "page": self.page}


PaginationCursor = Union[PageCursor, TokenCursor, OffsetCursor, HasMoreCursor]

CURSOR_TYPES: dict[str, type] = {
    PageCursor.kind: PageCursor,
    TokenCursor.kind: TokenCursor,
    OffsetCursor.kind: OffsetCursor,
    HasMoreCursor.kind: HasMoreCursor,
}


def cursor_from_dict(data: dict[str, Any]) -> PaginationCursor:
    """
    Rebuild a cursor from its `to_dict()` form.

    Raises:
        ValueError: If the kind is unknown or fields are missing/invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"cursor must be an object, got {type(data).__name__}")

    kind = data.get("kind")
    if kind == PageCursor.kind:
        return PageCursor(page=_as_int(data, "page"), page_size=_as_int(data, "page_size"))
    if kind == TokenCursor.kind:
        token = data.get("token")
        if not isinstance(token, str) or not token:
            raise ValueError("token cursor requires a non-empty 'token'")
        return TokenCursor(token=token)
    if kind == OffsetCursor.kind:
        return OffsetCursor(offset=_as_int(data, "offset"), limit=_as_int(data, "limit"))
    if kind == HasMoreCursor.kind:
        return HasMoreCursor(page=_as_int(data, "page"))

    raise ValueError(f"unknown cursor kind: {kind!r}")


def _as_int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass; a cursor field is never a bool
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"cursor field {key!r} must be a non-negative integer")
    return value
