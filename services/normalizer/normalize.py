"""
Job Posting Normalization Helpers

Shared rules every source adapter applies when it maps provider data into a
`CanonicalJobRecord`. Each adapter owns its own field mapping
(`map_to_common`); this module holds the pieces that must behave the same
everywhere.

Key Responsibilities:
- Fallback sentinels for missing title/company/location (never empty strings)
- Requirement extraction from free-text sections
- Salary formatting (absent salary is None, never a placeholder)
- Timestamp parsing
- Minimal stub records for postings that cannot be normalized
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from services.common.models import CanonicalJobRecord, Company, JobSource, make_record_id

logger = logging.getLogger(__name__)


# Fallback values so the presentation layer never renders a blank field
UNTITLED_POSITION = "Untitled Position"
COMPANY_NOT_AVAILABLE = "Company Name Not Available"
DEFAULT_LOCATION = "Remote"
DEFAULT_EMPLOYMENT_TYPE = "Full-time"
NO_DESCRIPTION = "No description available"

# Requirement entries must satisfy MIN <= len(entry) < MAX
REQUIREMENT_MIN_LENGTH = 6
REQUIREMENT_MAX_LENGTH = 500
MAX_REQUIREMENTS = 10

SECTION_REQUIREMENT_MIN_LENGTH = 11
SECTION_REQUIREMENT_MAX_LENGTH = 200
MAX_SECTION_REQUIREMENTS = 8

_REQUIREMENT_SPLIT_RE = re.compile(r"[\n•]")
_REQUIREMENT_SECTION_RE = re.compile(
    r"(?:required|requirements|qualifications|must have|skills)[:\s]*([^.]*(?:\n[^.\n]*)*)",
    re.IGNORECASE,
)


def first_non_empty(*values: Any) -> Optional[str]:
    """
    Return the first value that is a non-blank string, stripped.

    Used for field fallback chains, e.g. detail title -> listing title.
    """
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def extract_requirements(
    text: Optional[str],
    min_length: int = REQUIREMENT_MIN_LENGTH,
    max_length: int = REQUIREMENT_MAX_LENGTH,
    max_items: int = MAX_REQUIREMENTS,
) -> list[str]:
    """
    Split a plain-text requirements section into individual entries.

    Lines are split on newlines and bullets, trimmed, and kept only when
    ``min_length <= len(entry) < max_length``. Entries that are too long are
    dropped entirely rather than cut short. At most ``max_items`` entries are
    returned, in their original order.

    Examples:
        >>> extract_requirements("• 3+ years of Python\\n• SQL\\n• Experience with Airflow")
        ['3+ years of Python', 'Experience with Airflow']

    Args:
        text: Plain text (run HTML through html_to_text first)
        min_length: Minimum entry length (inclusive)
        max_length: Maximum entry length (exclusive)
        max_items: Cap on the number of entries

    Returns:
        List of requirement strings, possibly empty
    """
    if not text:
        return []

    entries: list[str] = []
    for part in _REQUIREMENT_SPLIT_RE.split(text):
        entry = part.strip()
        if min_length <= len(entry) < max_length:
            entries.append(entry)
            if len(entries) >= max_items:
                break
    return entries


def extract_requirements_section(text: Optional[str]) -> list[str]:
    """
    Find the first requirements-like section in a description and extract entries.

    The section starts at a keyword ("required", "requirements", "qualifications",
    "must have", "skills") and runs until the next sentence end. Leading dash
    bullets are removed from each entry.
    """
    if not text:
        return []

    match = _REQUIREMENT_SECTION_RE.search(text)
    if not match:
        return []

    lines = [line.strip().lstrip("-*").strip() for line in match.group(1).split("\n")]
    return extract_requirements(
        "\n".join(lines),
        min_length=SECTION_REQUIREMENT_MIN_LENGTH,
        max_length=SECTION_REQUIREMENT_MAX_LENGTH,
        max_items=MAX_SECTION_REQUIREMENTS,
    )


def format_yearly_salary(
    minimum: Optional[float],
    maximum: Optional[float],
    currency: Optional[str],
    default_currency: str = "GBP",
) -> Optional[str]:
    """
    Format a yearly compensation range.

    Examples:
        >>> format_yearly_salary(50000, 70000, "USD")
        '50,000 - 70,000 USD per year'
        >>> format_yearly_salary(None, None, "USD") is None
        True
    """
    currency = currency or default_currency
    low = _format_amount(minimum)
    high = _format_amount(maximum)

    if low and high:
        return f"{low} - {high} {currency} per year"
    if low:
        return f"From {low} {currency} per year"
    if high:
        return f"Up to {high} {currency} per year"
    return None


def _format_amount(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    return f"{value:,.0f}"


def build_benefits(flags: dict[str, bool]) -> Optional[str]:
    """Join the labels of every truthy benefit flag, or None when there are none."""
    labels = [label for label, enabled in flags.items() if enabled]
    return ", ".join(labels) if labels else None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp value into a timezone-aware datetime.

    Supports:
    - ISO 8601 strings (e.g., "2025-10-15T10:00:00Z", "2025-10-15")
    - Unix timestamps in seconds or milliseconds
    - datetime objects (naive values are assumed UTC)
    - None (returns None)

    Args:
        value: Timestamp value to parse

    Returns:
        datetime or None if invalid/missing
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return None
        try:
            parsed = datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Failed to parse timestamp string", extra={"value": value})
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        ts = float(value)
        if ts > 1e12:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (ValueError, OSError, OverflowError):
            logger.warning("Failed to parse Unix timestamp", extra={"value": value})
            return None

    logger.warning(
        "Unsupported timestamp type",
        extra={"value": value, "type": type(value).__name__},
    )
    return None


def published_or_now(value: Any) -> datetime:
    """Parse a publish date, using the current time when it is missing or invalid."""
    return parse_timestamp(value) or datetime.now(timezone.utc)


def truncate_summary(text: str, length: int = 200) -> str:
    """Short teaser used for social-sharing style summaries."""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def stub_record(
    source: JobSource,
    provider_id: Optional[Any] = None,
    title: Optional[str] = None,
) -> CanonicalJobRecord:
    """
    Minimal valid record for a posting that could not be normalized.

    Carries the id, a fallback title and the source so the page still holds the
    expected number of renderable entries.
    """
    if provider_id in (None, ""):
        provider_id = f"error_{uuid.uuid4().hex[:9]}"

    return CanonicalJobRecord(
        id=make_record_id(source, provider_id),
        title=first_non_empty(title) or UNTITLED_POSITION,
        company=Company(name=COMPANY_NOT_AVAILABLE),
        location=DEFAULT_LOCATION,
        employment_type=DEFAULT_EMPLOYMENT_TYPE,
        description=NO_DESCRIPTION,
        source=source,
        external=source is not JobSource.INTERNAL,
        published_at=datetime.now(timezone.utc),
        metadata={"stub": True},
    )
