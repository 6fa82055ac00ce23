"""
Internal job search facade.

Callers get one uniform page shape no matter which path served it:

1. The Typesense index ranks and filters, then hits are hydrated from
   PostgreSQL in rank order (``engine="indexed"``).
2. If the index is not configured or anything on that path fails, the same
   search runs directly against PostgreSQL with exact skip/limit and an exact
   count (``engine="fallback"``).
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from services.common.models import CanonicalJobRecord

from .db_operations import JobStore
from .search_index import TypesenseIndex

logger = logging.getLogger(__name__)

ENGINE_INDEXED = "indexed"
ENGINE_FALLBACK = "fallback"


@dataclass(frozen=True)
class SearchFilters:
    job_type: Optional[str] = None


@dataclass
class SearchPage:
    jobs: list[CanonicalJobRecord] = field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    # None when no search path served the page
    engine: Optional[str] = None


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


class SearchFacade:
    """Indexed search with a transparent database fallback."""

    def __init__(self, store: JobStore, index: Optional[TypesenseIndex] = None):
        self.store = store
        self.index = index

    def search(
        self,
        query: Optional[str],
        filters: Optional[SearchFilters] = None,
        page: int = 1,
        limit: int = 10,
    ) -> SearchPage:
        """
        Search internal jobs.

        Raises:
            DatabaseError: Only when the fallback path fails too
        """
        filters = filters or SearchFilters()

        if self.index is not None:
            try:
                return self._search_indexed(query, filters, page, limit)
            except Exception as e:
                logger.warning(
                    "Indexed search failed, falling back to database",
                    extra={"error": str(e), "error_type": type(e).__name__},
                )

        return self._search_database(query, filters, page, limit)

    def _search_indexed(
        self, query: Optional[str], filters: SearchFilters, page: int, limit: int
    ) -> SearchPage:
        hits = self.index.search(query, job_type=filters.job_type, page=page, per_page=limit)
        jobs = self.store.get_jobs_by_ids(hits.ids)
        return SearchPage(
            jobs=jobs,
            total=hits.found,
            total_pages=total_pages(hits.found, limit),
            engine=ENGINE_INDEXED,
        )

    def _search_database(
        self, query: Optional[str], filters: SearchFilters, page: int, limit: int
    ) -> SearchPage:
        total = self.store.count_jobs(query, filters.job_type)
        offset = (page - 1) * limit
        jobs: list[CanonicalJobRecord] = []
        if offset < total:
            jobs = self.store.search_jobs(query, filters.job_type, offset=offset, limit=limit)

        return SearchPage(
            jobs=jobs,
            total=total,
            total_pages=total_pages(total, limit),
            engine=ENGINE_FALLBACK,
        )
