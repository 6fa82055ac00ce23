"""
Unit tests for the Workable adapter.

These tests use mocked API responses to verify adapter behavior
without making real API calls.
"""

from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest
import requests

from services.common.cursors import CursorTypeError, OffsetCursor, TokenCursor
from services.common.models import JobSource
from services.normalizer import COMPANY_NOT_AVAILABLE, NO_DESCRIPTION
from services.source_extractor.adapters.workable_adapter import (
    WORKABLE_BASE_URL,
    WorkableAdapter,
    WorkableJob,
)
from services.source_extractor.base import MalformedPayloadError


# Sample Workable search response for testing
SAMPLE_WORKABLE_RESPONSE = {
    "totalSize": 42,
    "nextPageToken": "tok-2",
    "jobs": [
        {
            "id": "abc123",
            "title": "Data Engineer",
            "state": "published",
            "description": "<p>Build pipelines</p><ul><li>Python</li></ul>",
            "socialSharingDescription": "Join our data team",
            "employmentType": "Full-time",
            "benefitsSection": "<p>Pension</p>",
            "requirementsSection": "<ul><li>3+ years of Python</li><li>SQL</li></ul>",
            "url": "https://jobs.workable.com/view/abc123",
            "language": "en",
            "locations": ["London, England, United Kingdom"],
            "location": {"city": "London", "countryName": "United Kingdom"},
            "created": "2025-10-01T09:00:00Z",
            "company": {
                "title": "Acme Corp",
                "website": "https://acme.example.com",
                "image": "https://acme.example.com/logo.png",
                "description": "We make everything",
            },
            "workplace": "hybrid",
            "department": "Data",
        },
        {
            "id": "def456",
            "title": "Analyst",
            "locations": ["Remote, UK"],
        },
    ],
}


def _response(payload=None, status_code=200, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = payload
    return response


class TestWorkableJobDecoding:
    """Test decoding of one Workable job entry."""

    def test_from_payload_flattens_location_and_company(self):
        job = WorkableJob.from_payload(SAMPLE_WORKABLE_RESPONSE["jobs"][0])

        assert job.id == "abc123"
        assert job.city == "London"
        assert job.country_name == "United Kingdom"
        assert job.company_title == "Acme Corp"
        assert job.locations == ["London, England, United Kingdom"]

    def test_from_payload_requires_id(self):
        with pytest.raises(MalformedPayloadError):
            WorkableJob.from_payload({"title": "No id"})


class TestWorkableAdapterFetch:
    """Test the fetch() method."""

    @patch("services.source_extractor.base.requests.get")
    def test_fetch_success(self, mock_get):
        mock_get.return_value = _response(SAMPLE_WORKABLE_RESPONSE)

        adapter = WorkableAdapter()
        result = adapter.fetch("data", limit=10)

        # Verify API call
        mock_get.assert_called_once()
        call_args = mock_get.call_args
        assert call_args[0][0] == WORKABLE_BASE_URL
        assert call_args[1]["params"] == {"location": "United Kingdom", "query": "data"}
        assert call_args[1]["timeout"] == 10.0

        # Verify results
        assert result.ok
        assert result.total == 42
        assert result.next_cursor == TokenCursor(token="tok-2")
        assert [job.id for job in result.jobs] == ["workable_abc123", "workable_def456"]

    @patch("services.source_extractor.base.requests.get")
    def test_fetch_with_continuation_token(self, mock_get):
        mock_get.return_value = _response({"totalSize": 42, "jobs": []})

        adapter = WorkableAdapter(location="Germany")
        result = adapter.fetch(None, limit=10, cursor=TokenCursor(token="tok-2"))

        params = mock_get.call_args[1]["params"]
        assert params == {"location": "Germany", "nextPageToken": "tok-2"}
        assert result.next_cursor is None  # No token, listing exhausted

    @patch("services.source_extractor.base.requests.get")
    def test_fetch_replaces_undecodable_entry_with_stub(self, mock_get):
        payload = {"totalSize": 2, "jobs": [{"title": "Mystery job"}, SAMPLE_WORKABLE_RESPONSE["jobs"][1]]}
        mock_get.return_value = _response(payload)

        result = WorkableAdapter().fetch(None, limit=10)

        assert len(result.jobs) == 2
        assert result.jobs[0].id.startswith("workable_error_")
        assert result.jobs[0].title == "Mystery job"
        assert result.jobs[0].metadata == {"stub": True}
        assert result.jobs[1].id == "workable_def456"

    @patch("services.source_extractor.base.requests.get")
    def test_fetch_handles_500_error(self, mock_get):
        mock_get.return_value = _response(status_code=500, text="Internal Server Error")

        result = WorkableAdapter().fetch("data", limit=10)

        # HTTP errors are not retried and never raised
        mock_get.assert_called_once()
        assert result.jobs == []
        assert result.total == 0
        assert "API error 500" in result.error

    @patch("services.source_extractor.base.requests.get")
    def test_fetch_handles_429_error(self, mock_get):
        mock_get.return_value = _response(status_code=429, text="Rate limit exceeded")

        result = WorkableAdapter().fetch("data", limit=10)

        assert "Rate limit exceeded" in result.error

    @patch("services.source_extractor.base.requests.get")
    def test_fetch_handles_unexpected_shape(self, mock_get):
        mock_get.return_value = _response({"results": []})

        result = WorkableAdapter().fetch("data", limit=10)

        assert result.error.startswith("MalformedPayloadError")

    @patch("services.source_extractor.base.requests.get")
    def test_fetch_handles_invalid_json(self, mock_get):
        response = _response()
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        result = WorkableAdapter().fetch("data", limit=10)

        assert result.error.startswith("MalformedPayloadError")

    @patch("services.source_extractor.retry.time.sleep")
    @patch("services.source_extractor.base.requests.get")
    def test_fetch_handles_timeout(self, mock_get, mock_sleep):
        mock_get.side_effect = requests.exceptions.Timeout("timed out")

        result = WorkableAdapter().fetch("data", limit=10)

        assert not result.ok
        assert result.jobs == []

    def test_fetch_rejects_foreign_cursor(self):
        with pytest.raises(CursorTypeError):
            WorkableAdapter().fetch("data", limit=10, cursor=OffsetCursor(offset=10, limit=10))


class TestWorkableAdapterMapping:
    """Test the map_to_common() method."""

    def test_map_to_common_full_data(self):
        adapter = WorkableAdapter()
        job = WorkableJob.from_payload(SAMPLE_WORKABLE_RESPONSE["jobs"][0])

        record = adapter.map_to_common(job)

        assert record.id == "workable_abc123"
        assert record.title == "Data Engineer"
        assert record.company.name == "Acme Corp"
        assert record.company.logo_url == "https://acme.example.com/logo.png"
        assert record.location == "London, United Kingdom"
        assert record.employment_type == "Full-time"
        assert record.description == "Build pipelines\n\n• Python"
        assert record.description_html == "<p>Build pipelines</p><ul><li>Python</li></ul>"
        assert record.requirements == ["3+ years of Python"]
        assert record.salary is None
        assert record.published_at == datetime(2025, 10, 1, 9, 0, tzinfo=timezone.utc)
        assert record.apply_url == "https://jobs.workable.com/view/abc123"
        assert record.source is JobSource.WORKABLE
        assert record.external is True
        assert record.metadata["workplace"] == "hybrid"
        assert record.metadata["department"] == "Data"
        assert record.metadata["benefits"] == "Pension"
        assert record.metadata["summary"] == "Join our data team"

    def test_map_to_common_minimal_data(self):
        adapter = WorkableAdapter()
        job = WorkableJob.from_payload(SAMPLE_WORKABLE_RESPONSE["jobs"][1])

        record = adapter.map_to_common(job)

        assert record.title == "Analyst"
        assert record.location == "Remote, UK"
        assert record.company.name == COMPANY_NOT_AVAILABLE
        assert record.description == NO_DESCRIPTION
        assert record.employment_type == "Full-time"
        assert record.requirements == []
        assert record.metadata["workplace"] == "on-site"
        assert record.metadata["state"] == "published"

    def test_map_to_common_falls_back_to_sharing_description(self):
        adapter = WorkableAdapter()
        job = WorkableJob.from_payload({"id": "x1", "socialSharingDescription": "Short teaser"})

        record = adapter.map_to_common(job)

        assert record.description == "Short teaser"
        assert record.location == "Remote"


# ============================================================================
# Mark all tests as unit tests
# ============================================================================

pytestmark = pytest.mark.unit
