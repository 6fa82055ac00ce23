"""
Canonical job record shared by every component.

Every source (the internal store and each external job board) is mapped into
`CanonicalJobRecord` before it leaves its adapter. Downstream code (the
aggregator, the merger, the response envelope) never sees provider JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class JobSource(str, Enum):
    """Where a job record came from."""

    INTERNAL = "Internal"
    WORKABLE = "Workable"
    SMARTRECRUITERS = "SmartRecruiters"
    HIRINGCAFE = "HiringCafe"
    MOCK = "Mock"

    @property
    def id_prefix(self) -> str:
        """Prefix used for record ids, e.g. ``workable`` in ``workable_123``."""
        return self.value.lower()


def make_record_id(source: JobSource, provider_id: Any) -> str:
    """Build the source-prefixed record id (``{source}_{providerId}``)."""
    return f"{source.id_prefix}_{provider_id}"


@dataclass(frozen=True)
class Company:
    """Company block of a job record."""

    name: str
    logo_url: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "logoUrl": self.logo_url,
            "website": self.website,
            "description": self.description,
        }


@dataclass
class CanonicalJobRecord:
    """
    The single normalized job posting shape.

    Invariants:
        - ``id`` is source-prefixed so records from different sources never collide
        - ``external`` is False if and only if ``source`` is ``JobSource.INTERNAL``

    ``metadata`` is an open bag for source-specific fields (department,
    experience level, workplace type, ...). Nothing downstream requires it.
    """

    id: str
    title: str
    company: Company
    location: str
    employment_type: str
    description: str
    source: JobSource
    external: bool
    published_at: datetime
    apply_url: str = ""
    description_html: Optional[str] = None
    requirements: list[str] = field(default_factory=list)
    salary: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.external == (self.source is JobSource.INTERNAL):
            raise ValueError(
                f"external={self.external} is inconsistent with source={self.source.value}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape used in the response envelope."""
        published = self.published_at
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)

        return {
            "id": self.id,
            "title": self.title,
            "company": self.company.to_dict(),
            "location": self.location,
            "employmentType": self.employment_type,
            "description": self.description,
            "descriptionHtml": self.description_html,
            "requirements": list(self.requirements),
            "salary": self.salary,
            "publishedAt": published.isoformat(),
            "applyUrl": self.apply_url,
            "source": self.source.value,
            "external": self.external,
            "metadata": dict(self.metadata),
        }
