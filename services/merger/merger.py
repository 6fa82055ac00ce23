"""
Result Merger

Decides, per request, how many internal and external records make up a page
and computes the pagination metadata for the combined result.

Modes:
- INTERNAL_ONLY: exact page math straight from the search facade
- EXTERNAL_ONLY: token-based paging through the aggregator; totalPages is an
  estimate (one more page while a token exists)
- MIXED: internal records first, in their exact order. The page that
  exhausts the internal results is topped up with external ones; pages past
  the internal results are external only

Known limitation: external boards cannot skip, so pages past the internal
results start from the beginning of each board (or from the replayed
token). Such pages may repeat or skip external records.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from services.aggregator.aggregator import AggregationBatch, Aggregator
from services.common.errors import InvalidRequestError
from services.common.models import CanonicalJobRecord
from services.common.settings import DEFAULT_EXTERNAL_ONLY_TOTAL_CAP, DEFAULT_MIXED_EXTERNAL_TOTAL_CAP
from services.search.facade import SearchFacade, SearchFilters, SearchPage, total_pages

from .request import JobSearchRequest, Mode

logger = logging.getLogger(__name__)


@dataclass
class MergedPage:
    """One page of the combined result, ready to serialize."""

    jobs: list[CanonicalJobRecord] = field(default_factory=list)
    total_jobs: int = 0
    current_page: int = 1
    total_pages: int = 0
    has_next_page: bool = False
    next_external_page_token: Optional[str] = None
    is_token_based: Optional[bool] = None
    search_engine: Optional[str] = None

    def source_counts(self) -> tuple[int, int]:
        """(internal, external), counted from the jobs themselves."""
        external = sum(1 for job in self.jobs if job.external)
        return len(self.jobs) - external, external

    def to_dict(self) -> dict[str, Any]:
        internal, external = self.source_counts()

        pagination: dict[str, Any] = {"hasNextPage": self.has_next_page}
        if self.next_external_page_token is not None:
            pagination["nextExternalPageToken"] = self.next_external_page_token
        if self.is_token_based is not None:
            pagination["isTokenBased"] = self.is_token_based

        body: dict[str, Any] = {
            "jobs": [job.to_dict() for job in self.jobs],
            "totalJobs": self.total_jobs,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "sources": {"internal": internal, "external": external},
            "pagination": pagination,
        }
        if self.search_engine is not None:
            body["searchEngine"] = self.search_engine
        return body


class ResultMerger:
    """
    Top-level orchestrator over the internal search facade and the external aggregator.

    Either collaborator may be None (not configured); it then contributes
    nothing.
    """

    def __init__(
        self,
        facade: Optional[SearchFacade],
        aggregator: Optional[Aggregator],
        external_only_total_cap: int = DEFAULT_EXTERNAL_ONLY_TOTAL_CAP,
        mixed_external_total_cap: int = DEFAULT_MIXED_EXTERNAL_TOTAL_CAP,
    ):
        self.facade = facade
        self.aggregator = aggregator
        self.external_only_total_cap = external_only_total_cap
        self.mixed_external_total_cap = mixed_external_total_cap

    @property
    def has_external_sources(self) -> bool:
        return self.aggregator is not None and self.aggregator.has_sources

    def merge(self, request: JobSearchRequest) -> MergedPage:
        """
        Build one page for ``request``.

        Raises:
            InvalidRequestError: For a malformed external page token
        """
        mode = request.mode
        logger.info(
            "Merging job search results",
            extra={
                "mode": mode.value,
                "search": request.search,
                "page": request.page,
                "limit": request.limit,
            },
        )

        if mode is Mode.INTERNAL_ONLY:
            return self._internal_only(request)
        if mode is Mode.EXTERNAL_ONLY:
            return self._external_only(request)
        if mode is Mode.MIXED:
            return self._mixed(request)
        return MergedPage(current_page=request.page)

    def _internal_only(self, request: JobSearchRequest) -> MergedPage:
        internal = self._search_internal(request)
        return MergedPage(
            jobs=internal.jobs[: request.limit],
            total_jobs=internal.total,
            current_page=request.page,
            total_pages=internal.total_pages,
            has_next_page=request.page < internal.total_pages,
            search_engine=internal.engine,
        )

    def _external_only(self, request: JobSearchRequest) -> MergedPage:
        batch = self._fetch_external(request.search, request.limit, request.external_page_token)
        has_token = batch.next_token is not None
        return MergedPage(
            jobs=batch.jobs,
            total_jobs=min(batch.total_estimate, self.external_only_total_cap),
            current_page=request.page,
            total_pages=request.page + 1 if has_token else request.page,
            has_next_page=has_token,
            next_external_page_token=batch.next_token,
            is_token_based=True,
        )

    def _mixed(self, request: JobSearchRequest) -> MergedPage:
        limit = request.limit
        skip = request.skip
        internal = self._search_internal(request)
        internal_total = internal.total

        if skip < internal_total:
            jobs = list(internal.jobs[:limit])
            total = internal_total
            next_token = None
            external_called = False

            if len(jobs) < limit:
                remaining = limit - len(jobs)
                batch = self._fetch_external(request.search, remaining, request.external_page_token)
                jobs.extend(batch.jobs[:remaining])
                total = internal_total + min(batch.total_estimate, self.mixed_external_total_cap)
                next_token = batch.next_token
                external_called = True

            pages = total_pages(total, limit)
            has_next = request.page < pages

            # A full page that ends exactly on the last internal record still
            # has external results after it
            if not external_called and skip + len(jobs) >= internal_total and self.has_external_sources:
                has_next = True
                pages = max(pages, request.page + 1)
        else:
            batch = self._fetch_external(request.search, limit, request.external_page_token)
            jobs = list(batch.jobs[:limit])
            total = internal_total + min(batch.total_estimate, self.mixed_external_total_cap)
            next_token = batch.next_token
            pages = total_pages(total, limit)
            has_next = request.page < pages

        return MergedPage(
            jobs=jobs,
            total_jobs=total,
            current_page=request.page,
            total_pages=pages,
            has_next_page=has_next,
            next_external_page_token=next_token,
            search_engine=internal.engine,
        )

    def _search_internal(self, request: JobSearchRequest) -> SearchPage:
        if self.facade is None:
            return SearchPage()
        try:
            return self.facade.search(
                request.search,
                SearchFilters(job_type=request.job_type),
                page=request.page,
                limit=request.limit,
            )
        except InvalidRequestError:
            raise
        except Exception as e:
            logger.error(
                "Internal search failed, continuing without internal results",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return SearchPage()

    def _fetch_external(
        self, query: Optional[str], limit: int, token: Optional[str]
    ) -> AggregationBatch:
        if self.aggregator is None:
            return AggregationBatch()
        try:
            return self.aggregator.aggregate_all(query, limit, token)
        except InvalidRequestError:
            raise
        except Exception as e:
            logger.error(
                "External aggregation failed, continuing without external results",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return AggregationBatch()
