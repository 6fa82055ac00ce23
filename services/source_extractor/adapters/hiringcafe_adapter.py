"""
Hiring.cafe job board adapter.

Hiring.cafe is searched with a POST carrying a ``searchState`` document. It
does not hand out continuation tokens; the adapter pages by number and
decides whether another page exists from whatever the response exposes.

Three response shapes have been seen in practice and are all accepted:

- ``{"hits": [...], "nbHits": N, "page": P, "nbPages": M}``
- a bare list of jobs
- ``{"results": [...], "total": N, "hasMore": bool}``

Anything else is a malformed payload.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional

from services.common.cursors import HasMoreCursor
from services.common.models import CanonicalJobRecord, Company, JobSource, make_record_id
from services.normalizer.html_text import html_to_text
from services.normalizer.normalize import (
    COMPANY_NOT_AVAILABLE,
    DEFAULT_EMPLOYMENT_TYPE,
    DEFAULT_LOCATION,
    NO_DESCRIPTION,
    UNTITLED_POSITION,
    build_benefits,
    first_non_empty,
    format_yearly_salary,
    published_or_now,
    truncate_summary,
)

from ..base import FetchResult, MalformedPayloadError, SourceAdapter

logger = logging.getLogger(__name__)

HIRINGCAFE_BASE_URL = "https://hiring.cafe/api/search-jobs"
MAX_PAGE_SIZE = 50

DEFAULT_SEARCH_STATE: Mapping[str, Any] = MappingProxyType({
    "locations": (
        MappingProxyType({
            "formatted_address": "United Kingdom",
            "types": ("country",),
            "geometry": MappingProxyType({
                "location": MappingProxyType({"lat": "52.5876", "lon": "-1.9828"}),
            }),
            "id": "user_country",
            "address_components": (
                MappingProxyType({
                    "long_name": "United Kingdom",
                    "short_name": "GB",
                    "types": ("country",),
                }),
            ),
            "options": MappingProxyType({
                "flexible_regions": ("anywhere_in_continent", "anywhere_in_world"),
            }),
        }),
    ),
    "workplaceTypes": ("Remote", "Hybrid", "Onsite"),
    "seniorityLevel": (
        "No Prior Experience Required",
        "Entry Level",
        "Mid Level",
        "Senior Level",
    ),
    "roleTypes": ("Individual Contributor", "People Manager"),
    "dateFetchedPastNDays": 121,
    "sortBy": "default",
})

# (payload flag, label) in display order
BENEFIT_FLAGS: tuple[tuple[str, str], ...] = (
    ("generous_paid_time_off", "Generous paid time off"),
    ("four_day_work_week", "4-day work week"),
    ("retirement_plan", "Retirement plan"),
    ("generous_parental_leave", "Generous parental leave"),
    ("tuition_reimbursement", "Tuition reimbursement"),
    ("visa_sponsorship", "Visa sponsorship available"),
    ("relocation_assistance", "Relocation assistance"),
    ("401k_matching", "401k matching"),
)

_WORKPLACE_TYPES = MappingProxyType({"Remote": "remote", "Hybrid": "hybrid"})


def _to_json(value: Any) -> Any:
    """Turn the frozen search-state table into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    return value


def build_search_state(
    query: Optional[str],
    overrides: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """
    Build the ``searchState`` request document.

    Starts from ``DEFAULT_SEARCH_STATE``, applies top-level ``overrides`` from
    config, then sets ``searchQuery``.
    """
    state = _to_json(DEFAULT_SEARCH_STATE)
    if overrides:
        state.update(_to_json(overrides))
    state["searchQuery"] = query or ""
    return state


@dataclass
class HiringCafeJob:
    """One hit from the Hiring.cafe search response."""

    id: str
    apply_url: Optional[str] = None
    board_source: Optional[str] = None
    title: Optional[str] = None
    description_html: Optional[str] = None
    job_data: dict[str, Any] = field(default_factory=dict)
    company_data: dict[str, Any] = field(default_factory=dict)
    geolocation: Optional[dict[str, Any]] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "HiringCafeJob":
        if not isinstance(payload, dict):
            raise MalformedPayloadError("Hiring.cafe hit is not an object")

        job_id = payload.get("id") or payload.get("objectID")
        if not job_id:
            raise MalformedPayloadError("Hiring.cafe hit has no id")

        info = payload.get("job_information") or {}
        geoloc = payload.get("_geoloc")

        return cls(
            id=str(job_id),
            apply_url=payload.get("apply_url"),
            board_source=payload.get("source"),
            title=info.get("title"),
            description_html=info.get("description"),
            job_data=dict(payload.get("v5_processed_job_data") or {}),
            company_data=dict(payload.get("v5_processed_company_data") or {}),
            geolocation=geoloc[0] if isinstance(geoloc, list) and geoloc else None,
        )


class HiringCafeAdapter(SourceAdapter):
    """
    Adapter for the Hiring.cafe job search.

    Config params (``config/sources.yml``):
        base_url: Search endpoint
        page_size: Upper bound on ``size`` (default and maximum: 50)
        search_state: Top-level overrides merged into DEFAULT_SEARCH_STATE
    """

    source = JobSource.HIRINGCAFE
    cursor_type = HasMoreCursor

    def __init__(
        self,
        base_url: str = HIRINGCAFE_BASE_URL,
        page_size: int = MAX_PAGE_SIZE,
        search_state: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ):
        super().__init__(source_name="hiringcafe", **kwargs)
        self.base_url = base_url
        self.page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
        self.search_state_overrides = MappingProxyType(dict(search_state or {}))

    def _fetch_page(
        self,
        query: Optional[str],
        limit: int,
        cursor: Optional[HasMoreCursor],
    ) -> FetchResult:
        page = cursor.page if cursor is not None else 0
        size = min(max(limit, 1), self.page_size)
        body = {
            "size": size,
            "page": page,
            "searchState": build_search_state(query, self.search_state_overrides),
        }

        logger.info(
            "Fetching jobs from Hiring.cafe",
            extra={"query": query, "page": page, "size": size},
        )

        data = self._post_json(self.base_url, body)
        hits, total, has_more = self._read_page(data, page, size)

        return FetchResult(
            jobs=self.normalize_batch(hits, HiringCafeJob.from_payload),
            total=total,
            next_cursor=HasMoreCursor(page + 1) if has_more else None,
        )

    @staticmethod
    def _read_page(data: Any, page: int, size: int) -> tuple[list[Any], int, bool]:
        """Return (hits, total, has_more) for any of the known response shapes."""
        if isinstance(data, dict) and isinstance(data.get("hits"), list):
            hits = data["hits"]
            total = data.get("nbHits") or data.get("totalHits") or len(hits)
            if data.get("nbPages") is not None:
                current = data.get("page", page)
                has_more = current < data["nbPages"] - 1
            else:
                has_more = len(hits) >= size
        elif isinstance(data, list):
            hits = data
            total = len(hits)
            has_more = len(hits) >= size
        elif isinstance(data, dict) and isinstance(data.get("results"), list):
            hits = data["results"]
            total = data.get("total") or data.get("totalResults") or len(hits)
            has_more = bool(data["hasMore"]) if "hasMore" in data else len(hits) >= size
        else:
            shape = sorted(data) if isinstance(data, dict) else type(data).__name__
            raise MalformedPayloadError(f"Unexpected Hiring.cafe response shape: {shape}")

        return hits, int(total), has_more

    def _requirements(self, job_data: dict[str, Any]) -> list[str]:
        requirements = []
        summary = first_non_empty(job_data.get("requirements_summary"))
        if summary:
            requirements.append(summary)

        tools = job_data.get("technical_tools")
        if isinstance(tools, list) and tools:
            requirements.append(f"Technical skills: {', '.join(str(tool) for tool in tools)}")

        years = job_data.get("min_industry_and_role_yoe")
        if years and not job_data.get("is_min_industry_and_role_yoe_not_mentioned"):
            requirements.append(f"Minimum {years} years of experience required")
        return requirements

    def map_to_common(self, job: HiringCafeJob) -> CanonicalJobRecord:
        """Map a Hiring.cafe hit to the canonical record."""
        job_data = job.job_data
        company = job.company_data

        description = html_to_text(job.description_html)
        commitment = job_data.get("commitment")
        languages = job_data.get("language_requirements")
        workplace_type = job_data.get("workplace_type")

        return CanonicalJobRecord(
            id=make_record_id(self.source, job.id),
            title=first_non_empty(job_data.get("core_job_title"), job.title) or UNTITLED_POSITION,
            company=Company(
                name=first_non_empty(company.get("name"), job_data.get("company_name"))
                or COMPANY_NOT_AVAILABLE,
                logo_url=company.get("image_url") or None,
                website=first_non_empty(company.get("website"), job_data.get("company_website")),
                description=first_non_empty(company.get("tagline"), job_data.get("company_tagline")),
            ),
            location=first_non_empty(job_data.get("formatted_workplace_location"))
            or DEFAULT_LOCATION,
            employment_type=(
                first_non_empty(commitment[0]) if isinstance(commitment, list) and commitment else None
            )
            or DEFAULT_EMPLOYMENT_TYPE,
            description=description or NO_DESCRIPTION,
            description_html=job.description_html or None,
            requirements=self._requirements(job_data),
            salary=format_yearly_salary(
                job_data.get("yearly_min_compensation"),
                job_data.get("yearly_max_compensation"),
                job_data.get("listed_compensation_currency"),
            ),
            published_at=published_or_now(job_data.get("estimated_publish_date")),
            apply_url=job.apply_url or "",
            source=self.source,
            external=True,
            metadata={
                "board_source": job.board_source or "Unknown",
                "workplace": _WORKPLACE_TYPES.get(workplace_type, "on-site"),
                "workplace_type": workplace_type,
                "department": job_data.get("job_category"),
                "benefits": build_benefits(
                    {label: bool(job_data.get(flag)) for flag, label in BENEFIT_FLAGS}
                ),
                "requirements_section": job_data.get("requirements_summary"),
                "summary": truncate_summary(description) if description else None,
                "language": (
                    str(languages[0]).lower() if isinstance(languages, list) and languages else "en"
                ),
                "experience_level": job_data.get("seniority_level"),
                "industry": job_data.get("company_sector_and_industry"),
                "role_type": job_data.get("role_type"),
                "technical_tools": job_data.get("technical_tools") or [],
                "company_size": company.get("num_employees"),
                "company_founded": company.get("year_founded"),
                "visa_sponsorship": bool(job_data.get("visa_sponsorship")),
                "relocation_assistance": bool(job_data.get("relocation_assistance")),
                "company_activities": company.get("activities")
                or job_data.get("company_activities")
                or [],
                "company_industries": company.get("industries") or [],
                "geolocation": job.geolocation,
            },
        )
