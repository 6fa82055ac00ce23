"""
Unit tests for the external job aggregator.

MockAdapter instances stand in for the job boards so fan-out, partial
failure, total clamping and continuation tokens can be checked offline.
"""

import pytest

from services.aggregator import (
    AggregationBatch,
    Aggregator,
    InvalidPageTokenError,
    decode_continuation,
    encode_continuation,
)
from services.common.cursors import OffsetCursor, TokenCursor
from services.source_extractor.adapters.mock_adapter import MockAdapter


@pytest.fixture
def boards():
    """Two boards: one with plenty of jobs, one nearly empty."""
    return MockAdapter(num_jobs=30, source_name="alpha"), MockAdapter(num_jobs=5, source_name="beta")


class TestAggregateAll:
    """Test one fan-out across all boards."""

    def test_concatenates_in_configuration_order(self, boards):
        alpha, beta = boards
        batch = Aggregator([alpha, beta]).aggregate_all("engineer", limit=10)

        assert isinstance(batch, AggregationBatch)
        assert len(batch.jobs) == 15
        assert batch.jobs[0].id == "mock_alpha-0"
        assert batch.jobs[9].id == "mock_alpha-9"
        assert batch.jobs[10].id == "mock_beta-0"
        assert batch.total_estimate == 35
        assert batch.errors == {}

    def test_next_token_only_carries_boards_with_more_results(self, boards):
        batch = Aggregator(list(boards)).aggregate_all("engineer", limit=10)

        assert decode_continuation(batch.next_token) == {"alpha": OffsetCursor(offset=10, limit=10)}

    def test_one_board_failing_does_not_fail_the_batch(self, boards):
        alpha, _ = boards
        broken = MockAdapter(num_jobs=50, fail_on_attempt=-1, source_name="broken")

        batch = Aggregator([alpha, broken]).aggregate_all("engineer", limit=10)

        assert len(batch.jobs) == 10
        assert all(job.id.startswith("mock_alpha-") for job in batch.jobs)
        assert batch.total_estimate == 30
        assert list(batch.errors) == ["broken"]
        assert "ConnectionError" in batch.errors["broken"]

    def test_all_boards_failing_gives_empty_batch(self):
        adapters = [
            MockAdapter(fail_on_attempt=-1, source_name="a"),
            MockAdapter(fail_on_attempt=-1, source_name="b"),
        ]

        batch = Aggregator(adapters).aggregate_all(None, limit=10)

        assert batch.jobs == []
        assert batch.total_estimate == 0
        assert batch.next_token is None
        assert set(batch.errors) == {"a", "b"}

    def test_board_totals_are_clamped(self):
        adapters = [MockAdapter(num_jobs=5000, source_name="huge"), MockAdapter(num_jobs=40, source_name="small")]

        batch = Aggregator(adapters, per_source_total_cap=1000).aggregate_all(None, limit=5)

        assert batch.total_estimate == 1040

    def test_no_boards(self):
        aggregator = Aggregator([])

        assert aggregator.has_sources is False
        assert aggregator.aggregate_all("engineer", limit=10) == AggregationBatch()

    def test_duplicate_board_names_are_rejected(self):
        with pytest.raises(ValueError, match="alpha"):
            Aggregator([MockAdapter(source_name="alpha"), MockAdapter(source_name="alpha")])


class TestContinuation:
    """Test replaying a continuation token."""

    def test_replay_skips_exhausted_boards(self, boards):
        alpha, beta = boards
        aggregator = Aggregator([alpha, beta])
        first = aggregator.aggregate_all("engineer", limit=10)

        second = aggregator.aggregate_all("engineer", limit=10, continuation_token=first.next_token)

        assert [job.id for job in second.jobs] == [f"mock_alpha-{i}" for i in range(10, 20)]
        assert beta.attempt_count == 1
        assert decode_continuation(second.next_token) == {"alpha": OffsetCursor(offset=20, limit=10)}

    def test_last_page_has_no_token(self, boards):
        alpha, beta = boards
        token = encode_continuation({"alpha": OffsetCursor(offset=20, limit=10)})

        batch = Aggregator([alpha, beta]).aggregate_all(None, limit=10, continuation_token=token)

        assert len(batch.jobs) == 10
        assert batch.next_token is None

    def test_unknown_board_in_token_is_ignored(self, boards):
        token = encode_continuation({
            "retired-board": OffsetCursor(offset=10, limit=10),
            "alpha": OffsetCursor(offset=10, limit=10),
        })

        batch = Aggregator(list(boards)).aggregate_all(None, limit=10, continuation_token=token)

        assert batch.jobs[0].id == "mock_alpha-10"

    def test_cursor_of_wrong_kind_is_an_invalid_token(self, boards):
        token = encode_continuation({"alpha": TokenCursor(token="abc")})

        with pytest.raises(InvalidPageTokenError):
            Aggregator(list(boards)).aggregate_all(None, limit=10, continuation_token=token)

    def test_malformed_token(self, boards):
        with pytest.raises(InvalidPageTokenError):
            Aggregator(list(boards)).aggregate_all(None, limit=10, continuation_token="%%%")


# ============================================================================
# Mark all tests as unit tests
# ============================================================================

pytestmark = pytest.mark.unit
