"""
Unit tests for the SmartRecruiters adapter.

The listing endpoint and the per-job detail documents are served from a
dictionary of mocked responses keyed by URL.
"""

from unittest.mock import Mock, patch

import pytest

from services.common.cursors import OffsetCursor
from services.source_extractor.adapters.smartrecruiters_adapter import (
    NO_DETAIL_DESCRIPTION,
    SMARTRECRUITERS_BASE_URL,
    SmartRecruitersAdapter,
    SmartRecruitersDetail,
    SmartRecruitersJob,
)

DETAIL_URL_1 = "https://api.smartrecruiters.com/v1/companies/acme/postings/111"
DETAIL_URL_2 = "https://api.smartrecruiters.com/v1/companies/globex/postings/222"

SAMPLE_LISTING = {
    "totalFound": 25,
    "content": [
        {
            "id": "111",
            "name": "Data Engineer",
            "company": {"name": "Acme", "logo": "https://acme.example.com/logo.png"},
            "releasedDate": "2025-10-01T00:00:00.000Z",
            "location": {"city": "London", "region": "England", "country": "gb", "remote": False},
            "actions": {"details": DETAIL_URL_1},
        },
        {
            "id": "222",
            "name": "Analyst",
            "company": {"name": "Globex"},
            "location": {"city": "Berlin", "country": "de", "remote": True},
            "actions": {"details": DETAIL_URL_2},
            "applyUrl": "https://jobs.smartrecruiters.com/globex/222",
        },
    ],
}

SAMPLE_DETAIL = {
    "name": "Senior Data Engineer",
    "company": {"name": "Acme Ltd"},
    "location": {"fullLocation": "London, England, United Kingdom", "remote": False},
    "jobAd": {
        "sections": {
            "companyDescription": {"text": "<p>We build</p>"},
            "jobDescription": {
                "text": "<p>Requirements:</p><ul><li>Strong Python experience</li>"
                "<li>Airflow orchestration skills</li></ul>"
            },
            "qualifications": {"text": "<p>BSc in CS</p>"},
            "additionalInformation": {"text": "<p>Pension</p>"},
        }
    },
    "typeOfEmployment": {"id": "permanent", "label": "Full-time"},
    "experienceLevel": {"id": "mid_senior_level", "label": "Mid-Senior Level"},
    "industry": {"id": "it", "label": "Software"},
    "function": {"id": "eng", "label": "Engineering"},
    "applyUrl": "https://jobs.smartrecruiters.com/acme/111/apply",
    "language": {"code": "en"},
    "active": True,
    "refNumber": "REF1",
}


def _response(payload=None, status_code=200, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = payload
    return response


def _serve(responses):
    """side_effect for requests.get that answers by URL."""
    def fake_get(url, **kwargs):
        return responses[url]
    return fake_get


class TestSmartRecruitersAdapterFetch:
    """Test listing and detail fetching."""

    @patch("services.source_extractor.base.requests.get")
    def test_fetch_listing_and_details(self, mock_get):
        mock_get.side_effect = _serve({
            SMARTRECRUITERS_BASE_URL: _response(SAMPLE_LISTING),
            DETAIL_URL_1: _response(SAMPLE_DETAIL),
            DETAIL_URL_2: _response(status_code=500, text="boom"),
        })

        result = SmartRecruitersAdapter().fetch("data", limit=10)

        listing_call = [c for c in mock_get.call_args_list if c[0][0] == SMARTRECRUITERS_BASE_URL][0]
        assert listing_call[1]["params"] == {"limit": 10, "offset": 0, "keyword": "data"}
        assert mock_get.call_count == 3

        assert result.ok
        assert result.total == 25
        assert result.next_cursor == OffsetCursor(offset=10, limit=10)
        assert [job.id for job in result.jobs] == ["smartrecruiters_111", "smartrecruiters_222"]

    @patch("services.source_extractor.base.requests.get")
    def test_failed_detail_degrades_only_that_record(self, mock_get):
        mock_get.side_effect = _serve({
            SMARTRECRUITERS_BASE_URL: _response(SAMPLE_LISTING),
            DETAIL_URL_1: _response(SAMPLE_DETAIL),
            DETAIL_URL_2: _response(status_code=500, text="boom"),
        })

        result = SmartRecruitersAdapter().fetch("data", limit=10)
        with_detail, without_detail = result.jobs

        assert with_detail.title == "Senior Data Engineer"
        assert without_detail.title == "Analyst"
        assert without_detail.description == NO_DETAIL_DESCRIPTION
        assert without_detail.requirements == []

    @patch("services.source_extractor.base.requests.get")
    def test_fetch_without_details(self, mock_get):
        mock_get.side_effect = _serve({SMARTRECRUITERS_BASE_URL: _response(SAMPLE_LISTING)})

        result = SmartRecruitersAdapter(fetch_details=False).fetch(None, limit=10)

        mock_get.assert_called_once()
        assert "keyword" not in mock_get.call_args[1]["params"]
        assert all(job.description == NO_DETAIL_DESCRIPTION for job in result.jobs)

    @patch("services.source_extractor.base.requests.get")
    def test_page_size_is_clamped(self, mock_get):
        mock_get.side_effect = _serve({SMARTRECRUITERS_BASE_URL: _response({"totalFound": 0, "content": []})})

        SmartRecruitersAdapter(fetch_details=False).fetch(None, limit=500)

        assert mock_get.call_args[1]["params"]["limit"] == 100

    @patch("services.source_extractor.base.requests.get")
    def test_last_page_has_no_cursor(self, mock_get):
        mock_get.side_effect = _serve({SMARTRECRUITERS_BASE_URL: _response(SAMPLE_LISTING)})

        result = SmartRecruitersAdapter(fetch_details=False).fetch(
            None, limit=10, cursor=OffsetCursor(offset=20, limit=10)
        )

        assert mock_get.call_args[1]["params"] == {"limit": 10, "offset": 20}
        assert result.next_cursor is None

    @patch("services.source_extractor.base.requests.get")
    def test_missing_content_is_a_failed_page(self, mock_get):
        mock_get.side_effect = _serve({SMARTRECRUITERS_BASE_URL: _response({"totalFound": 3})})

        result = SmartRecruitersAdapter().fetch(None, limit=10)

        assert result.error.startswith("MalformedPayloadError")
        assert result.total == 0


class TestSmartRecruitersAdapterMapping:
    """Test the map_to_common() method."""

    def _job(self, index: int, detail=None) -> SmartRecruitersJob:
        job = SmartRecruitersJob.from_payload(SAMPLE_LISTING["content"][index])
        job.detail = detail
        return job

    def test_map_with_detail(self):
        adapter = SmartRecruitersAdapter()
        record = adapter.map_to_common(self._job(0, SmartRecruitersDetail.from_payload(SAMPLE_DETAIL)))

        assert record.title == "Senior Data Engineer"
        assert record.company.name == "Acme Ltd"
        assert record.company.logo_url == "https://acme.example.com/logo.png"
        assert record.company.description == "We build"
        assert record.location == "London, England, United Kingdom"
        assert record.employment_type == "Full-time"
        assert record.requirements == ["Strong Python experience", "Airflow orchestration skills"]
        assert record.description.startswith("Requirements:\n\n• Strong Python experience")
        assert "\n\nQualifications:\nBSc in CS" in record.description
        assert record.description.endswith("\n\nAdditional Information:\nPension")
        assert '<div class="job-section"><h3>Qualifications</h3><p>BSc in CS</p></div>' in record.description_html
        assert record.apply_url == "https://jobs.smartrecruiters.com/acme/111/apply"
        assert record.metadata["experience_level"] == "Mid-Senior Level"
        assert record.metadata["department"] == "Engineering"
        assert record.metadata["industry"] == "Software"
        assert record.metadata["state"] == "published"
        assert record.metadata["ref_number"] == "REF1"
        assert record.metadata["workplace"] == "on-site"

    def test_map_without_detail(self):
        adapter = SmartRecruitersAdapter()
        record = adapter.map_to_common(self._job(1))

        assert record.title == "Analyst"
        assert record.company.name == "Globex"
        assert record.location == "Berlin, Germany"
        assert record.employment_type == "Remote"
        assert record.description == NO_DETAIL_DESCRIPTION
        assert record.description_html is None
        assert record.apply_url == "https://jobs.smartrecruiters.com/globex/222"
        assert record.metadata["workplace"] == "remote"

    def test_listing_location_skips_region_equal_to_city(self):
        adapter = SmartRecruitersAdapter()
        job = SmartRecruitersJob.from_payload({
            "id": "9",
            "location": {"city": "Singapore", "region": "Singapore", "country": "sg"},
        })

        assert adapter.map_to_common(job).location == "Singapore, Singapore"

    def test_inactive_detail_is_closed(self):
        adapter = SmartRecruitersAdapter()
        detail = SmartRecruitersDetail.from_payload({**SAMPLE_DETAIL, "active": False})

        assert adapter.map_to_common(self._job(0, detail)).metadata["state"] == "closed"


# ============================================================================
# Mark all tests as unit tests
# ============================================================================

pytestmark = pytest.mark.unit
