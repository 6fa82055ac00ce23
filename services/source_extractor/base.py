"""Source Adapter Base Class.

This module defines the interface every job board adapter implements and the
result type adapters hand back to the aggregator.

The contract that matters most: `SourceAdapter.fetch()` never raises for
upstream problems. Network failures, timeouts, non-2xx responses and
malformed payloads all come back as a `FetchResult` with no jobs, a zero total
and the error recorded. This is what lets the aggregator treat every source
the same way and keeps one broken provider from failing a whole request.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

import requests

from services.common.cursors import CursorTypeError, PaginationCursor
from services.common.models import CanonicalJobRecord, JobSource
from services.normalizer.normalize import stub_record

from .retry import retry_with_backoff

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_RETRIES = 1
DEFAULT_RETRY_DELAY_SECONDS = 0.5


class UpstreamError(Exception):
    """Raised inside an adapter when the provider answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedPayloadError(UpstreamError):
    """Raised inside an adapter when the provider's JSON has an unexpected shape."""


@dataclass
class FetchResult:
    """One page from one source, already normalized.

    ``error`` is set when the page could not be fetched; in that case ``jobs``
    is empty and ``total`` is 0.
    """

    jobs: list[CanonicalJobRecord] = field(default_factory=list)
    total: int = 0
    next_cursor: Optional[PaginationCursor] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: str) -> "FetchResult":
        return cls(jobs=[], total=0, next_cursor=None, error=error)


class SourceAdapter(ABC):
    """Abstract base class for job board adapters.

    Each adapter owns exactly one upstream protocol and one cursor type.
    Subclasses implement:

    - `_fetch_page()`: call the provider and build a `FetchResult`. It may
      raise freely; `fetch()` turns every failure into an empty result.
    - `map_to_common()`: map one decoded provider job to `CanonicalJobRecord`.

    Usage:
        class MyBoardAdapter(SourceAdapter):
            source = JobSource.WORKABLE
            cursor_type = TokenCursor

            def _fetch_page(self, query, limit, cursor):
                payload = self._get_json(url, params={...})
                jobs = self.normalize_batch(payload["jobs"], MyBoardJob.from_payload)
                return FetchResult(jobs=jobs, total=...)

            def map_to_common(self, job):
                ...
    """

    source: JobSource
    cursor_type: type

    def __init__(
        self,
        source_name: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    ):
        """Initialize the adapter.

        Args:
            source_name: Unique identifier for this adapter (e.g. "workable").
                         Also the key used in continuation tokens.
            timeout_seconds: Timeout applied to every HTTP request
            max_retries: Retries for connection errors and timeouts
            retry_delay_seconds: Initial backoff delay between retries
        """
        self.source_name = source_name
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

    def fetch(
        self,
        query: Optional[str],
        limit: int,
        cursor: Optional[PaginationCursor] = None,
    ) -> FetchResult:
        """Fetch one page of normalized jobs.

        Args:
            query: Free-text search, or None for the provider's default listing
            limit: Requested page size (providers may clamp it)
            cursor: Continuation state from a previous page of this same source

        Returns:
            FetchResult; on any upstream failure, an empty result with ``error`` set

        Raises:
            CursorTypeError: If ``cursor`` belongs to a different kind of source
        """
        self.check_cursor(cursor)

        try:
            result = self._fetch_page(query, limit, cursor)
        except Exception as e:
            logger.error(
                "Failed to fetch jobs from %s: %s",
                self.source_name,
                e,
                extra={
                    "source": self.source_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            return FetchResult.failed(f"{type(e).__name__}: {e}")

        logger.info(
            "Fetched jobs from %s",
            self.source_name,
            extra={
                "source": self.source_name,
                "jobs_returned": len(result.jobs),
                "total": result.total,
                "has_next_page": result.next_cursor is not None,
            },
        )
        return result

    def check_cursor(self, cursor: Optional[PaginationCursor]) -> None:
        """Raise CursorTypeError unless ``cursor`` is None or this adapter's cursor type."""
        if cursor is not None and not isinstance(cursor, self.cursor_type):
            raise CursorTypeError(
                f"{self.__class__.__name__} expects {self.cursor_type.__name__}, "
                f"got {type(cursor).__name__}"
            )

    @abstractmethod
    def _fetch_page(
        self,
        query: Optional[str],
        limit: int,
        cursor: Optional[PaginationCursor],
    ) -> FetchResult:
        """Call the provider and build one page of results. May raise."""

    @abstractmethod
    def map_to_common(self, job: Any) -> CanonicalJobRecord:
        """Map one decoded provider job to the canonical record. May raise."""

    def normalize_batch(
        self,
        items: Iterable[Any],
        decode: Optional[Callable[[Any], Any]] = None,
    ) -> list[CanonicalJobRecord]:
        """Decode and map a page of provider jobs, replacing failures with stubs.

        A posting that cannot be decoded or mapped never aborts the batch.

        Args:
            items: Raw provider entries (or already decoded jobs when ``decode`` is None)
            decode: Turns one raw entry into the provider dataclass
        """
        records = []
        for item in items:
            try:
                job = decode(item) if decode else item
                records.append(self.map_to_common(job))
            except Exception as e:
                provider_id = _lookup(item, "id")
                logger.warning(
                    "Failed to normalize job posting, using stub",
                    extra={
                        "source": self.source_name,
                        "provider_job_id": provider_id,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                )
                title = _lookup(item, "title")
                records.append(
                    stub_record(
                        self.source,
                        provider_id,
                        title if isinstance(title, str) else None,
                    )
                )
        return records

    def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET a JSON document, retrying transport errors."""
        return self._send("GET", url, params=params)

    def _post_json(self, url: str, body: dict[str, Any]) -> Any:
        """POST a JSON body and return the JSON response, retrying transport errors."""
        return self._send("POST", url, json=body)

    def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        send = retry_with_backoff(
            max_retries=self.max_retries,
            initial_delay=self.retry_delay_seconds,
        )(self._send_once)
        return send(method, url, **kwargs)

    def _send_once(self, method: str, url: str, **kwargs: Any) -> Any:
        logger.debug(
            "Making %s API call",
            self.source_name,
            extra={"source": self.source_name, "method": method, "url": url},
        )

        if method == "POST":
            response = requests.post(url, timeout=self.timeout_seconds, **kwargs)
        else:
            response = requests.get(url, timeout=self.timeout_seconds, **kwargs)

        if response.status_code == 429:
            raise UpstreamError("Rate limit exceeded - too many API calls", 429)
        if response.status_code >= 400:
            raise UpstreamError(
                f"API error {response.status_code}: {response.text[:200]}",
                response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedPayloadError(f"Response is not valid JSON: {e}") from e

    def __repr__(self) -> str:
        """String representation of the adapter."""
        return f"{self.__class__.__name__}(source='{self.source_name}')"


def _lookup(item: Any, key: str) -> Any:
    """Read ``key`` from a raw dict entry or a decoded dataclass."""
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)
