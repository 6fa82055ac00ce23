"""
Pytest configuration and shared fixtures

This file contains test fixtures that can be used across all tests.
Fixtures are reusable components that set up test preconditions.

Learn more: https://docs.pytest.org/en/stable/fixture.html
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import pytest

from services.common.models import CanonicalJobRecord, Company, JobSource, make_record_id

BASE_PUBLISHED_AT = datetime(2025, 10, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def database_url() -> Optional[str]:
    """
    Provide the test database URL.

    Only TEST_DATABASE_URL is honoured so integration tests can never point at
    a development database by accident.

    Scope: session (created once per test run)

    Returns:
        str or None: PostgreSQL connection URL
    """
    return os.getenv("TEST_DATABASE_URL")


def build_internal_job(index: int, title: str = "Data Engineer") -> CanonicalJobRecord:
    """Internal record with a deterministic id and publish date (newest first by index)."""
    return CanonicalJobRecord(
        id=make_record_id(JobSource.INTERNAL, index),
        title=f"{title} {index}",
        company=Company(name="Acme Corp"),
        location="London, United Kingdom",
        employment_type="Full-time",
        description="We are seeking a Data Engineer with experience in Python, SQL, and Airflow.",
        requirements=["3+ years of Python"],
        published_at=BASE_PUBLISHED_AT - timedelta(hours=index),
        apply_url=f"https://example.com/apply/{index}",
        source=JobSource.INTERNAL,
        external=False,
    )


@pytest.fixture(scope="function")
def make_internal_job() -> Callable[..., CanonicalJobRecord]:
    """
    Provide a factory for internal job records.

    Scope: function (created fresh for each test)

    Returns:
        Callable: build_internal_job(index, title="Data Engineer")
    """
    return build_internal_job


@pytest.fixture(scope="function")
def internal_jobs() -> Callable[[int], list[CanonicalJobRecord]]:
    """
    Provide a factory for a batch of internal job records.

    Useful for paging and merging tests.

    Returns:
        Callable: internal_jobs(count) -> list of records
    """
    def factory(count: int) -> list[CanonicalJobRecord]:
        return [build_internal_job(i + 1) for i in range(count)]

    return factory


# Mark tests based on their type for selective running
def pytest_configure(config):
    """
    Register custom pytest markers.

    This allows us to run specific test categories:
    - pytest -m unit        (run only unit tests)
    - pytest -m integration (run only integration tests)
    - pytest -m "not slow"  (skip slow tests)
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (isolated, fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (>1 second)"
    )
