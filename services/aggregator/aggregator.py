"""
External Job Aggregator

Fans one search out to every configured job board adapter and combines the
pages into a single batch.

Key Concepts:
- Every adapter is called concurrently on a thread pool, and the call waits
  for all of them (a slow board delays the batch, bounded by its timeout)
- Jobs are concatenated in adapter configuration order; within one board the
  board's own order is kept. There is no cross-board ranking
- A board that fails contributes no jobs and a zero total
- Each board's total is clamped before summing, since some boards report
  totals far larger than anyone will page through
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Sequence

from services.common.cursors import CursorTypeError, PaginationCursor
from services.common.models import CanonicalJobRecord
from services.source_extractor.base import FetchResult, SourceAdapter
from services.source_extractor.source_config import DEFAULT_PER_SOURCE_TOTAL_CAP

from .continuation import InvalidPageTokenError, decode_continuation, encode_continuation

logger = logging.getLogger(__name__)


@dataclass
class AggregationBatch:
    """Combined external page.

    ``next_token`` is present only when at least one board has more results.
    ``errors`` maps adapter name to the failure message for boards that failed.
    """

    jobs: list[CanonicalJobRecord] = field(default_factory=list)
    total_estimate: int = 0
    next_token: Optional[str] = None
    errors: dict[str, str] = field(default_factory=dict)


class Aggregator:
    """
    Concurrent fan-out over the external job board adapters.

    Example:
        aggregator = Aggregator(build_adapters(config), per_source_total_cap=1000)
        batch = aggregator.aggregate_all("data engineer", limit=10)
        next_batch = aggregator.aggregate_all("data engineer", 10, batch.next_token)
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        per_source_total_cap: int = DEFAULT_PER_SOURCE_TOTAL_CAP,
        max_workers: Optional[int] = None,
    ):
        names = [adapter.source_name for adapter in adapters]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Adapter names must be unique, duplicated: {', '.join(duplicates)}")

        self.adapters = list(adapters)
        self.per_source_total_cap = per_source_total_cap
        self.max_workers = max_workers

    @property
    def has_sources(self) -> bool:
        """True when at least one external adapter is configured."""
        return bool(self.adapters)

    def aggregate_all(
        self,
        query: Optional[str],
        limit: int,
        continuation_token: Optional[str] = None,
    ) -> AggregationBatch:
        """
        Fetch one page from every active adapter and combine them.

        Args:
            query: Free-text search passed to every board
            limit: Requested page size per board
            continuation_token: Token from a previous batch, or None for the first page

        Returns:
            AggregationBatch

        Raises:
            InvalidPageTokenError: If the token is malformed or a cursor does
                not match its adapter
        """
        plan = self._plan(continuation_token)
        if not plan:
            return AggregationBatch()

        workers = min(self.max_workers or len(plan), len(plan))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="aggregator") as pool:
            futures = [
                pool.submit(adapter.fetch, query, limit, cursor) for adapter, cursor in plan
            ]
            results: list[FetchResult] = [future.result() for future in futures]

        batch = AggregationBatch()
        next_cursors: dict[str, PaginationCursor] = {}
        for (adapter, _), result in zip(plan, results):
            batch.jobs.extend(result.jobs)
            batch.total_estimate += min(max(result.total, 0), self.per_source_total_cap)
            if result.error is not None:
                batch.errors[adapter.source_name] = result.error
            if result.next_cursor is not None:
                next_cursors[adapter.source_name] = result.next_cursor

        batch.next_token = encode_continuation(next_cursors)

        logger.info(
            "Aggregated external jobs",
            extra={
                "sources_queried": [adapter.source_name for adapter, _ in plan],
                "failed_sources": sorted(batch.errors),
                "jobs_returned": len(batch.jobs),
                "total_estimate": batch.total_estimate,
                "has_next_page": batch.next_token is not None,
            },
        )
        return batch

    def _plan(
        self, continuation_token: Optional[str]
    ) -> list[tuple[SourceAdapter, Optional[PaginationCursor]]]:
        """Pair each adapter to query with its cursor."""
        if continuation_token is None:
            return [(adapter, None) for adapter in self.adapters]

        cursors = decode_continuation(continuation_token)

        known = {adapter.source_name for adapter in self.adapters}
        unknown = sorted(set(cursors) - known)
        if unknown:
            logger.warning(
                "Ignoring continuation cursors for unconfigured sources",
                extra={"sources": unknown},
            )

        plan = []
        for adapter in self.adapters:
            if adapter.source_name not in cursors:
                continue
            cursor = cursors[adapter.source_name]
            try:
                adapter.check_cursor(cursor)
            except CursorTypeError as exc:
                raise InvalidPageTokenError(
                    f"externalPageToken cursor does not match source {adapter.source_name!r}"
                ) from exc
            plan.append((adapter, cursor))
        return plan
