"""Mock Adapter for Testing.

This adapter simulates an external job board for tests and local runs.
It doesn't make real HTTP requests, but follows the same contract as the
real adapters (offset pagination, stub substitution, never-throw fetch).
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from services.common.cursors import OffsetCursor
from services.common.models import CanonicalJobRecord, Company, JobSource, make_record_id

from ..base import FetchResult, SourceAdapter

JOB_TITLES = (
    "Data Engineer",
    "Analytics Engineer",
    "Data Scientist",
    "Machine Learning Engineer",
    "Data Analyst",
    "ETL Developer",
)

COMPANIES = (
    "Acme Corp",
    "Globex Inc",
    "Initech LLC",
    "Umbrella Corporation",
    "Wayne Enterprises",
)

LOCATIONS = (
    "London, United Kingdom",
    "Manchester, United Kingdom",
    "Berlin, Germany",
    "Remote",
    "New York, United States",
)

EMPLOYMENT_TYPES = ("Full-time", "Part-time", "Contract")

_EPOCH = datetime(2025, 10, 15, 10, 0, tzinfo=timezone.utc)


class MockAdapter(SourceAdapter):
    """Mock adapter that returns fake job postings.

    This adapter is useful for:
    - Unit testing the aggregator and merger without hitting real APIs
    - Demonstrating how to implement SourceAdapter
    - Testing partial-failure handling

    Example:
        adapter = MockAdapter(num_jobs=50)
        result = adapter.fetch("engineer", limit=10)
        assert len(result.jobs) == 10
        assert result.next_cursor == OffsetCursor(offset=10, limit=10)

        more = adapter.fetch("engineer", limit=10, cursor=result.next_cursor)
        assert len(more.jobs) == 10
    """

    source = JobSource.MOCK
    cursor_type = OffsetCursor

    def __init__(
        self,
        num_jobs: int = 100,
        fail_on_attempt: int = 0,
        source_name: str = "mock",
        **kwargs: Any,
    ):
        """Initialize the mock adapter.

        Args:
            num_jobs: Total number of fake jobs available
            fail_on_attempt: If > 0, fail on this attempt number (for testing
                             partial failure); if < 0, fail on every attempt
            source_name: Adapter name (lets tests register several mocks)
        """
        super().__init__(source_name=source_name, **kwargs)
        self.num_jobs = num_jobs
        self.fail_on_attempt = fail_on_attempt
        self.attempt_count = 0
        # fetch() runs on aggregator worker threads
        self._attempt_lock = threading.Lock()

    def _fetch_page(
        self,
        query: Optional[str],
        limit: int,
        cursor: Optional[OffsetCursor],
    ) -> FetchResult:
        with self._attempt_lock:
            self.attempt_count += 1
            attempt = self.attempt_count
        if self.fail_on_attempt < 0 or attempt == self.fail_on_attempt:
            raise ConnectionError("Simulated API failure for testing")

        if cursor is None:
            cursor = OffsetCursor(offset=0, limit=max(limit, 1))

        end = min(cursor.offset + cursor.limit, self.num_jobs)
        jobs = [self._generate_fake_job(i) for i in range(cursor.offset, end)]

        return FetchResult(
            jobs=self.normalize_batch(jobs),
            total=self.num_jobs,
            next_cursor=cursor.next_after(self.num_jobs),
        )

    def map_to_common(self, job: dict[str, Any]) -> CanonicalJobRecord:
        """Map mock job data to the canonical record."""
        return CanonicalJobRecord(
            id=make_record_id(self.source, job["id"]),
            title=job["title"],
            company=Company(name=job["company"]),
            location=job["location"],
            employment_type=job["employment_type"],
            description=job["description"],
            requirements=list(job["skills"]),
            published_at=job["posted_at"],
            apply_url=job["apply_url"],
            source=self.source,
            external=True,
            metadata={"adapter": self.source_name},
        )

    def _generate_fake_job(self, index: int) -> dict[str, Any]:
        """Generate a fake job posting.

        Args:
            index: Job index for unique data

        Returns:
            Dictionary with fake job data
        """
        title = JOB_TITLES[index % len(JOB_TITLES)]
        company = COMPANIES[index % len(COMPANIES)]

        return {
            "id": f"{self.source_name}-{index}",
            "title": title,
            "company": company,
            "location": LOCATIONS[index % len(LOCATIONS)],
            "employment_type": EMPLOYMENT_TYPES[index % len(EMPLOYMENT_TYPES)],
            "description": f"We are seeking a {title} to join our team at {company}. "
            f"You will work with Python, SQL, and various data tools.",
            "skills": ["Python", "SQL", "Airflow", "dbt"],
            "posted_at": _EPOCH - timedelta(hours=index),
            "apply_url": f"https://example.com/apply/{index}",
        }
