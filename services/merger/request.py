"""
Job search request parsing.

Turns raw query parameters (strings, as they arrive from a query string or
the CLI) into a validated `JobSearchRequest`. Parameter names follow the
public API: ``search``, ``jobType``, ``page``, ``limit``,
``includeExternal``, ``includeInternal``, ``externalPageToken``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from services.common.errors import InvalidRequestError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_TRUE_VALUES = frozenset({"true", "1", "yes"})
_FALSE_VALUES = frozenset({"false", "0", "no"})


class Mode(Enum):
    """Which sources a request draws from."""

    INTERNAL_ONLY = "internal_only"
    EXTERNAL_ONLY = "external_only"
    MIXED = "mixed"
    NONE = "none"


@dataclass(frozen=True)
class JobSearchRequest:
    search: Optional[str] = None
    job_type: Optional[str] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    include_external: bool = True
    include_internal: bool = True
    external_page_token: Optional[str] = None

    @property
    def mode(self) -> Mode:
        if self.include_internal and self.include_external:
            return Mode.MIXED
        if self.include_internal:
            return Mode.INTERNAL_ONLY
        if self.include_external:
            return Mode.EXTERNAL_ONLY
        return Mode.NONE

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def cache_key(self) -> str:
        return f"jobs:{self.search or 'all'}:{self.job_type or 'all'}:{self.page}:{self.limit}"


def parse_bool(name: str, value: Any, default: bool) -> bool:
    """Accept true/false, 1/0 and yes/no (case-insensitive)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "":
        return default
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise InvalidRequestError(f"{name} must be one of true/false, 1/0, yes/no")


def parse_int(name: str, value: Any, default: int, minimum: int, maximum: Optional[int] = None) -> int:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return default
    if isinstance(value, bool):
        raise InvalidRequestError(f"{name} must be an integer")
    try:
        number = int(str(value).strip())
    except ValueError:
        raise InvalidRequestError(f"{name} must be an integer") from None

    if number < minimum or (maximum is not None and number > maximum):
        bounds = f"between {minimum} and {maximum}" if maximum is not None else f"at least {minimum}"
        raise InvalidRequestError(f"{name} must be {bounds}")
    return number


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_request(params: Mapping[str, Any]) -> JobSearchRequest:
    """
    Validate raw request parameters.

    Raises:
        InvalidRequestError: If page, limit or a boolean flag is invalid
    """
    return JobSearchRequest(
        search=_optional_text(params.get("search")),
        job_type=_optional_text(params.get("jobType")),
        page=parse_int("page", params.get("page"), DEFAULT_PAGE, minimum=1),
        limit=parse_int("limit", params.get("limit"), DEFAULT_LIMIT, minimum=1, maximum=MAX_LIMIT),
        include_external=parse_bool("includeExternal", params.get("includeExternal"), True),
        include_internal=parse_bool("includeInternal", params.get("includeInternal"), True),
        external_page_token=_optional_text(params.get("externalPageToken")),
    )


__all__ = ["InvalidRequestError", "JobSearchRequest", "Mode", "parse_bool", "parse_request"]
