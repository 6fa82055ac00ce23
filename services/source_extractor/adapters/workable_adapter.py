"""
Workable job board adapter.

Queries the public Workable jobs search (no API key needed) and maps the
postings to canonical records. Workable paginates with an opaque
``nextPageToken``; when the response carries no token the listing is
exhausted.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from services.common.cursors import TokenCursor
from services.common.models import CanonicalJobRecord, Company, JobSource, make_record_id
from services.normalizer.html_text import html_to_text
from services.normalizer.normalize import (
    COMPANY_NOT_AVAILABLE,
    DEFAULT_EMPLOYMENT_TYPE,
    DEFAULT_LOCATION,
    NO_DESCRIPTION,
    UNTITLED_POSITION,
    extract_requirements,
    first_non_empty,
    published_or_now,
    truncate_summary,
)

from ..base import FetchResult, MalformedPayloadError, SourceAdapter

logger = logging.getLogger(__name__)

WORKABLE_BASE_URL = "https://jobs.workable.com/api/v1/jobs"
DEFAULT_SEARCH_LOCATION = "United Kingdom"


@dataclass
class WorkableJob:
    """One posting from the Workable search response."""

    id: str
    title: Optional[str] = None
    state: Optional[str] = None
    description: Optional[str] = None
    social_sharing_description: Optional[str] = None
    employment_type: Optional[str] = None
    benefits_section: Optional[str] = None
    requirements_section: Optional[str] = None
    url: Optional[str] = None
    language: Optional[str] = None
    locations: list[str] = field(default_factory=list)
    city: Optional[str] = None
    country_name: Optional[str] = None
    created: Optional[str] = None
    company_title: Optional[str] = None
    company_website: Optional[str] = None
    company_image: Optional[str] = None
    company_description: Optional[str] = None
    workplace: Optional[str] = None
    department: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "WorkableJob":
        """Decode one entry of the ``jobs`` array."""
        if not isinstance(payload, dict) or payload.get("id") in (None, ""):
            raise MalformedPayloadError("Workable job entry has no id")

        location = payload.get("location") or {}
        company = payload.get("company") or {}
        locations = payload.get("locations") or []

        return cls(
            id=str(payload["id"]),
            title=payload.get("title"),
            state=payload.get("state"),
            description=payload.get("description"),
            social_sharing_description=payload.get("socialSharingDescription"),
            employment_type=payload.get("employmentType"),
            benefits_section=payload.get("benefitsSection"),
            requirements_section=payload.get("requirementsSection"),
            url=payload.get("url"),
            language=payload.get("language"),
            locations=[loc for loc in locations if isinstance(loc, str)],
            city=location.get("city"),
            country_name=location.get("countryName"),
            created=payload.get("created"),
            company_title=company.get("title"),
            company_website=company.get("website"),
            company_image=company.get("image"),
            company_description=company.get("description"),
            workplace=payload.get("workplace"),
            department=payload.get("department"),
        )


class WorkableAdapter(SourceAdapter):
    """
    Adapter for the Workable public job search.

    Config params (``config/sources.yml``):
        base_url: Search endpoint (default: jobs.workable.com)
        location: Location filter sent with every search (default: United Kingdom)
    """

    source = JobSource.WORKABLE
    cursor_type = TokenCursor

    def __init__(
        self,
        base_url: str = WORKABLE_BASE_URL,
        location: str = DEFAULT_SEARCH_LOCATION,
        **kwargs: Any,
    ):
        super().__init__(source_name="workable", **kwargs)
        self.base_url = base_url
        self.location = location

    def _fetch_page(
        self,
        query: Optional[str],
        limit: int,
        cursor: Optional[TokenCursor],
    ) -> FetchResult:
        # Workable chooses its own page size; limit is not forwarded
        params: dict[str, Any] = {"location": self.location}
        if query:
            params["query"] = query
        if cursor is not None:
            params["nextPageToken"] = cursor.token

        logger.info(
            "Fetching jobs from Workable",
            extra={
                "query": query,
                "location": self.location,
                "continuation": cursor is not None,
            },
        )

        data = self._get_json(self.base_url, params=params)
        if not isinstance(data, dict) or not isinstance(data.get("jobs"), list):
            raise MalformedPayloadError("Workable response has no `jobs` list")

        next_token = data.get("nextPageToken")

        return FetchResult(
            jobs=self.normalize_batch(data["jobs"], WorkableJob.from_payload),
            total=int(data.get("totalSize") or 0),
            next_cursor=TokenCursor(next_token) if next_token else None,
        )

    def map_to_common(self, job: WorkableJob) -> CanonicalJobRecord:
        """
        Map a Workable posting to the canonical record.

        Location prefers "city, country" and falls back to the first entry of
        ``locations``. Requirements come from ``requirementsSection``.
        """
        description = html_to_text(job.description or job.social_sharing_description)

        if job.city and job.country_name:
            location = f"{job.city}, {job.country_name}"
        else:
            location = first_non_empty(*job.locations) or DEFAULT_LOCATION

        benefits = html_to_text(job.benefits_section) or None

        return CanonicalJobRecord(
            id=make_record_id(self.source, job.id),
            title=first_non_empty(job.title) or UNTITLED_POSITION,
            company=Company(
                name=first_non_empty(job.company_title) or COMPANY_NOT_AVAILABLE,
                logo_url=job.company_image or None,
                website=job.company_website or None,
                description=job.company_description or None,
            ),
            location=location,
            employment_type=first_non_empty(job.employment_type) or DEFAULT_EMPLOYMENT_TYPE,
            description=description or NO_DESCRIPTION,
            description_html=job.description or None,
            requirements=extract_requirements(html_to_text(job.requirements_section)),
            salary=None,
            published_at=published_or_now(job.created),
            apply_url=job.url or "",
            source=self.source,
            external=True,
            metadata={
                "workplace": job.workplace or "on-site",
                "department": job.department or job.company_title,
                "benefits": benefits,
                "summary": job.social_sharing_description
                or (truncate_summary(description) if description else None),
                "language": job.language or "en",
                "state": job.state or "published",
            },
        )
