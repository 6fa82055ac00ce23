"""
Composite continuation tokens.

One external page is made of one page from every job board, and each board
paginates differently. The token handed to clients packs the next cursor of
every board that still has results:

    urlsafe_base64(json({"workable": {"kind": "token", "token": "..."},
                         "smartrecruiters": {"kind": "offset", "offset": 20, "limit": 10}}))

Clients treat it as opaque. Boards missing from a token are exhausted.
"""

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Optional

from services.common.cursors import PaginationCursor, cursor_from_dict
from services.common.errors import InvalidRequestError


class InvalidPageTokenError(InvalidRequestError):
    """The external page token is not one we issued, or no longer fits the sources."""
    pass


def encode_continuation(cursors: Mapping[str, PaginationCursor]) -> Optional[str]:
    """
    Pack per-source cursors into one opaque token.

    Returns:
        The token, or None when no source has a next page
    """
    if not cursors:
        return None

    payload = {name: cursor.to_dict() for name, cursor in cursors.items()}
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_continuation(token: str) -> dict[str, PaginationCursor]:
    """
    Unpack a token produced by `encode_continuation`.

    Raises:
        InvalidPageTokenError: If the token is not valid base64 JSON of
            source name -> cursor
    """
    if not isinstance(token, str) or not token.strip():
        raise InvalidPageTokenError("externalPageToken must be a non-empty string")

    token = token.strip()
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError) as exc:
        raise InvalidPageTokenError("externalPageToken is malformed") from exc

    if not isinstance(payload, dict) or not payload:
        raise InvalidPageTokenError("externalPageToken is malformed")

    cursors: dict[str, PaginationCursor] = {}
    for name, data in payload.items():
        try:
            cursors[name] = cursor_from_dict(data)
        except ValueError as exc:
            raise InvalidPageTokenError(f"externalPageToken has an invalid cursor for {name!r}") from exc
    return cursors
