"""
SmartRecruiters job board adapter.

The public search endpoint returns thin listings; each listing links to a
detail document (``actions.details``) with the full job ad. Details are
fetched concurrently on a small thread pool and preferred over listing data
when present. A failed detail fetch only degrades that one record.

Pagination is offset based: the next offset is ``offset + limit`` while it is
still below ``totalFound``.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Optional

from services.common.cursors import OffsetCursor
from services.common.models import CanonicalJobRecord, Company, JobSource, make_record_id
from services.normalizer.country_codes import country_name
from services.normalizer.html_text import html_to_text, strip_tags
from services.normalizer.normalize import (
    COMPANY_NOT_AVAILABLE,
    DEFAULT_EMPLOYMENT_TYPE,
    DEFAULT_LOCATION,
    UNTITLED_POSITION,
    extract_requirements_section,
    first_non_empty,
    published_or_now,
    truncate_summary,
)

from ..base import FetchResult, MalformedPayloadError, SourceAdapter

logger = logging.getLogger(__name__)

SMARTRECRUITERS_BASE_URL = "https://jobs.smartrecruiters.com/sr-jobs/search"
MAX_PAGE_SIZE = 100
DEFAULT_DETAIL_WORKERS = 8
NO_DETAIL_DESCRIPTION = "View full job details on SmartRecruiters"


def _label(value: Any) -> Optional[str]:
    """SmartRecruiters wraps enums as ``{"id": ..., "label": ...}``."""
    if isinstance(value, dict):
        return first_non_empty(value.get("label"))
    return None


@dataclass
class SmartRecruitersDetail:
    """The job ad document behind ``actions.details``."""

    name: Optional[str] = None
    company_name: Optional[str] = None
    full_location: Optional[str] = None
    remote: bool = False
    description_html: Optional[str] = None
    company_description_html: Optional[str] = None
    qualifications_html: Optional[str] = None
    additional_information_html: Optional[str] = None
    employment_type: Optional[str] = None
    experience_level: Optional[str] = None
    industry: Optional[str] = None
    function: Optional[str] = None
    apply_url: Optional[str] = None
    language: Optional[str] = None
    active: bool = True
    ref_number: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SmartRecruitersDetail":
        if not isinstance(payload, dict):
            raise MalformedPayloadError("SmartRecruiters detail is not an object")

        location = payload.get("location") or {}
        company = payload.get("company") or {}
        sections = (payload.get("jobAd") or {}).get("sections") or {}

        def section_text(name: str) -> Optional[str]:
            section = sections.get(name) or {}
            return section.get("text") or None

        return cls(
            name=payload.get("name"),
            company_name=company.get("name"),
            full_location=location.get("fullLocation"),
            remote=bool(location.get("remote")),
            description_html=section_text("jobDescription"),
            company_description_html=section_text("companyDescription"),
            qualifications_html=section_text("qualifications"),
            additional_information_html=section_text("additionalInformation"),
            employment_type=_label(payload.get("typeOfEmployment")),
            experience_level=_label(payload.get("experienceLevel")),
            industry=_label(payload.get("industry")),
            function=_label(payload.get("function")),
            apply_url=payload.get("applyUrl"),
            language=(payload.get("language") or {}).get("code"),
            active=bool(payload.get("active", True)),
            ref_number=payload.get("refNumber"),
        )


@dataclass
class SmartRecruitersJob:
    """One listing from the SmartRecruiters search response."""

    id: str
    name: Optional[str] = None
    company_name: Optional[str] = None
    company_logo: Optional[str] = None
    released_date: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    remote: bool = False
    details_url: Optional[str] = None
    apply_url: Optional[str] = None
    short_location: Optional[str] = None
    released_ago: Optional[str] = None
    detail: Optional[SmartRecruitersDetail] = field(default=None, repr=False)

    @property
    def title(self) -> Optional[str]:
        return self.name

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SmartRecruitersJob":
        if not isinstance(payload, dict) or payload.get("id") in (None, ""):
            raise MalformedPayloadError("SmartRecruiters listing has no id")

        company = payload.get("company") or {}
        location = payload.get("location") or {}
        actions = payload.get("actions") or {}

        return cls(
            id=str(payload["id"]),
            name=payload.get("name"),
            company_name=company.get("name"),
            company_logo=company.get("logo"),
            released_date=payload.get("releasedDate"),
            city=location.get("city"),
            region=location.get("region"),
            country=location.get("country"),
            remote=bool(location.get("remote")),
            details_url=actions.get("details"),
            apply_url=payload.get("applyUrl"),
            short_location=payload.get("shortLocation"),
            released_ago=payload.get("releasedAgo"),
        )


class SmartRecruitersAdapter(SourceAdapter):
    """
    Adapter for the SmartRecruiters public job search.

    Config params (``config/sources.yml``):
        base_url: Search endpoint
        fetch_details: Fetch the full job ad for every listing (default: True)
        detail_workers: Thread pool size for detail fetches (default: 8)
    """

    source = JobSource.SMARTRECRUITERS
    cursor_type = OffsetCursor

    def __init__(
        self,
        base_url: str = SMARTRECRUITERS_BASE_URL,
        fetch_details: bool = True,
        detail_workers: int = DEFAULT_DETAIL_WORKERS,
        **kwargs: Any,
    ):
        super().__init__(source_name="smartrecruiters", **kwargs)
        self.base_url = base_url
        self.fetch_details = fetch_details
        self.detail_workers = max(1, detail_workers)

    def _fetch_page(
        self,
        query: Optional[str],
        limit: int,
        cursor: Optional[OffsetCursor],
    ) -> FetchResult:
        if cursor is None:
            cursor = OffsetCursor(offset=0, limit=min(max(limit, 1), MAX_PAGE_SIZE))

        params: dict[str, Any] = {"limit": cursor.limit, "offset": cursor.offset}
        if query:
            params["keyword"] = query

        logger.info(
            "Fetching jobs from SmartRecruiters",
            extra={"query": query, "offset": cursor.offset, "limit": cursor.limit},
        )

        data = self._get_json(self.base_url, params=params)
        if not isinstance(data, dict) or not isinstance(data.get("content"), list):
            raise MalformedPayloadError("SmartRecruiters response has no `content` list")

        total = int(data.get("totalFound") or 0)
        listings = data["content"]
        details = self._fetch_details(listings) if self.fetch_details else {}

        def decode(item: Any) -> SmartRecruitersJob:
            job = SmartRecruitersJob.from_payload(item)
            job.detail = details.get(job.id)
            return job

        return FetchResult(
            jobs=self.normalize_batch(listings, decode),
            total=total,
            next_cursor=cursor.next_after(total),
        )

    def _fetch_details(self, listings: list[Any]) -> dict[str, SmartRecruitersDetail]:
        """Fetch detail documents concurrently, keyed by listing id."""
        targets: dict[str, str] = {}
        for item in listings:
            if not isinstance(item, dict):
                continue
            url = (item.get("actions") or {}).get("details")
            if item.get("id") not in (None, "") and url:
                targets[str(item["id"])] = url

        if not targets:
            return {}

        details: dict[str, SmartRecruitersDetail] = {}
        with ThreadPoolExecutor(max_workers=min(self.detail_workers, len(targets))) as pool:
            futures = {
                pool.submit(self._fetch_detail, job_id, url): job_id
                for job_id, url in targets.items()
            }
            for future in as_completed(futures):
                detail = future.result()
                if detail is not None:
                    details[futures[future]] = detail

        logger.debug(
            "Fetched SmartRecruiters job details",
            extra={"requested": len(targets), "fetched": len(details)},
        )
        return details

    def _fetch_detail(self, job_id: str, url: str) -> Optional[SmartRecruitersDetail]:
        try:
            return SmartRecruitersDetail.from_payload(self._get_json(url))
        except Exception as e:
            logger.warning(
                "Could not fetch SmartRecruiters job details, using listing data",
                extra={"provider_job_id": job_id, "error": str(e)},
            )
            return None

    def _listing_location(self, job: SmartRecruitersJob) -> str:
        parts = []
        if job.city:
            parts.append(job.city)
        if job.region and job.region != job.city:
            parts.append(job.region)
        if job.country:
            parts.append(country_name(job.country))
        if parts:
            return ", ".join(parts)
        return first_non_empty(job.short_location) or DEFAULT_LOCATION

    def map_to_common(self, job: SmartRecruitersJob) -> CanonicalJobRecord:
        """
        Map a listing (plus its detail document, when fetched) to the canonical record.

        Without a detail document the description is a pointer to the job ad
        and no requirements are extracted.
        """
        detail = job.detail

        location = (detail and first_non_empty(detail.full_location)) or self._listing_location(job)

        description = NO_DETAIL_DESCRIPTION
        description_html = None
        requirements: list[str] = []
        qualifications = None
        additional_information = None
        company_description = None

        if detail is not None:
            if detail.description_html:
                description = html_to_text(detail.description_html) or NO_DETAIL_DESCRIPTION
                description_html = detail.description_html
                requirements = extract_requirements_section(description)
            company_description = strip_tags(detail.company_description_html) or None
            qualifications = strip_tags(detail.qualifications_html) or None
            additional_information = strip_tags(detail.additional_information_html) or None

        summary = truncate_summary(description)
        if qualifications:
            description += "\n\nQualifications:\n" + qualifications
        if additional_information:
            description += "\n\nAdditional Information:\n" + additional_information

        html_sections = [description_html or ""]
        if detail is not None and detail.qualifications_html:
            html_sections.append(
                f'<div class="job-section"><h3>Qualifications</h3>{detail.qualifications_html}</div>'
            )
        if detail is not None and detail.additional_information_html:
            html_sections.append(
                '<div class="job-section"><h3>Additional Information</h3>'
                f"{detail.additional_information_html}</div>"
            )
        combined_html = "".join(html_sections) or None

        if detail is not None and detail.employment_type:
            employment_type = detail.employment_type
        elif job.remote:
            employment_type = "Remote"
        else:
            employment_type = DEFAULT_EMPLOYMENT_TYPE

        remote = job.remote or (detail is not None and detail.remote)

        return CanonicalJobRecord(
            id=make_record_id(self.source, job.id),
            title=first_non_empty(detail and detail.name, job.name) or UNTITLED_POSITION,
            company=Company(
                name=first_non_empty(detail and detail.company_name, job.company_name)
                or COMPANY_NOT_AVAILABLE,
                logo_url=job.company_logo or None,
                website=None,
                description=company_description,
            ),
            location=location,
            employment_type=employment_type,
            description=description,
            description_html=combined_html,
            requirements=requirements,
            salary=None,
            published_at=published_or_now(job.released_date),
            apply_url=first_non_empty(detail and detail.apply_url, job.apply_url) or "",
            source=self.source,
            external=True,
            metadata={
                "workplace": "remote" if remote else "on-site",
                "department": detail.function if detail else None,
                "experience_level": detail.experience_level if detail else None,
                "industry": detail.industry if detail else None,
                "benefits": additional_information,
                "qualifications": qualifications,
                "summary": summary,
                "language": (detail and detail.language) or "en",
                "state": "published" if detail is None or detail.active else "closed",
                "ref_number": detail.ref_number if detail else None,
                "details_url": job.details_url,
                "released_ago": job.released_ago,
            },
        )
