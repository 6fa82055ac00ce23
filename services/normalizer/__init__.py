"""
Normalizer.

Shared rules for turning provider job data into the canonical record:
HTML-to-text cleanup, requirement extraction, country lookup, fallback
sentinels and stub records. Field mapping itself lives in each source adapter.
"""

from .country_codes import country_name
from .html_text import collapse_whitespace, html_to_text, strip_tags
from .normalize import (
    COMPANY_NOT_AVAILABLE,
    DEFAULT_EMPLOYMENT_TYPE,
    DEFAULT_LOCATION,
    NO_DESCRIPTION,
    UNTITLED_POSITION,
    extract_requirements,
    extract_requirements_section,
    stub_record,
)

__all__ = [
    "COMPANY_NOT_AVAILABLE",
    "DEFAULT_EMPLOYMENT_TYPE",
    "DEFAULT_LOCATION",
    "NO_DESCRIPTION",
    "UNTITLED_POSITION",
    "collapse_whitespace",
    "country_name",
    "extract_requirements",
    "extract_requirements_section",
    "html_to_text",
    "strip_tags",
    "stub_record",
]
