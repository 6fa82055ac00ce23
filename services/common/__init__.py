"""
Common building blocks shared across the job search services.

Small, dependency-light modules reused by every component: the canonical job
record, the per-source pagination cursors, and environment settings.
"""

from .cursors import (
    CursorTypeError,
    HasMoreCursor,
    OffsetCursor,
    PageCursor,
    PaginationCursor,
    TokenCursor,
    cursor_from_dict,
)
from .errors import InvalidRequestError
from .models import CanonicalJobRecord, Company, JobSource, make_record_id

__all__ = [
    "CanonicalJobRecord",
    "Company",
    "CursorTypeError",
    "HasMoreCursor",
    "InvalidRequestError",
    "JobSource",
    "OffsetCursor",
    "PageCursor",
    "PaginationCursor",
    "TokenCursor",
    "cursor_from_dict",
    "make_record_id",
]
