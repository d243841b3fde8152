"""Unit tests for BatchProcessor."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from src.analyzer import (
    AnalysisCache,
    AnalysisOracle,
    EmailAnalyzer,
    OracleError,
    RateLimiter,
    ServiceStats,
)
from src.batch import BatchProcessor, BatchResult, chunked
from tests.analysis_test_helpers import FakeAdapter, FakeClock, make_analysis, make_email


def _emails(count: int):
    return [make_email(id=f"m{i}", body=f"Message number {i}") for i in range(1, count + 1)]


def _mock_analyzer(fail_ids=(), delay=0.0):
    """MagicMock analyzer whose analyze() fails for the given email ids."""
    analyzer = MagicMock()

    def analyze(email):
        if delay:
            time.sleep(delay)
        if email.id in fail_ids:
            raise OracleError(f"raw provider failure for {email.id}")
        return make_analysis(email_id=email.id, importance=6)

    analyzer.analyze.side_effect = analyze
    analyzer.oracle.stats.return_value = ServiceStats(
        cache_size=0, recent_request_count=0, rate_limit_status="available"
    )
    return analyzer


class TestChunked:
    def test_chunked(self):
        assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]

    def test_chunked_empty(self):
        assert chunked([], 3) == []


class TestBatchProcessor:
    """Tests for BatchProcessor.process_batch()."""

    def test_rejects_zero_concurrency(self):
        with pytest.raises(ValueError):
            BatchProcessor(_mock_analyzer(), concurrency=0)

    def test_all_succeed_in_input_order(self):
        processor = BatchProcessor(_mock_analyzer(), concurrency=3, sleep=MagicMock())

        batch = processor.process_batch(_emails(7))

        assert [r.email_id for r in batch.results] == [f"m{i}" for i in range(1, 8)]
        assert batch.statistics.total_emails == 7
        assert batch.statistics.processed_emails == 7
        assert batch.statistics.failed_emails == 0
        assert batch.errors == []

    def test_failure_is_isolated(self):
        """One failing email never aborts its siblings."""
        processor = BatchProcessor(_mock_analyzer(fail_ids={"m3"}), concurrency=3, sleep=MagicMock())

        batch = processor.process_batch(_emails(5))

        assert [r.email_id for r in batch.results] == ["m1", "m2", "m4", "m5"]
        assert batch.statistics.processed_emails == 4
        assert batch.statistics.failed_emails == 1
        assert len(batch.errors) == 1
        error = batch.errors[0]
        assert error.email_id == "m3"
        assert error.kind == "oracle_error"
        assert error.message == "AI analysis failed"
        assert "raw provider failure" not in error.to_dict()["message"]

    def test_unknown_exception_tagged_internal(self):
        analyzer = _mock_analyzer()
        analyzer.analyze.side_effect = RuntimeError("bug")
        processor = BatchProcessor(analyzer, sleep=MagicMock())

        batch = processor.process_batch(_emails(1))

        assert batch.errors[0].kind == "internal_error"
        assert batch.errors[0].message == "Email analysis failed"

    def test_sleeps_between_groups_only(self):
        sleep = MagicMock()
        processor = BatchProcessor(_mock_analyzer(), concurrency=2, delay=1.5, sleep=sleep)

        processor.process_batch(_emails(5))

        # Three groups -> two pauses, none after the last group
        assert sleep.call_count == 2
        sleep.assert_called_with(1.5)

    def test_single_group_never_sleeps(self):
        sleep = MagicMock()
        processor = BatchProcessor(_mock_analyzer(), concurrency=3, sleep=sleep)

        processor.process_batch(_emails(3))

        sleep.assert_not_called()

    def test_delay_applies_even_when_emails_fail(self):
        sleep = MagicMock()
        processor = BatchProcessor(
            _mock_analyzer(fail_ids={"m1", "m2"}), concurrency=1, delay=1.0, sleep=sleep
        )

        processor.process_batch(_emails(3))

        assert sleep.call_count == 2

    def test_group_members_run_concurrently(self):
        in_flight = 0
        peak = 0
        lock = threading.Lock()
        analyzer = _mock_analyzer()

        def analyze(email):
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            time.sleep(0.2)
            with lock:
                in_flight -= 1
            return make_analysis(email_id=email.id)

        analyzer.analyze.side_effect = analyze
        processor = BatchProcessor(analyzer, concurrency=3, sleep=MagicMock())

        processor.process_batch(_emails(6))

        assert peak == 3

    def test_all_failed_average_is_zero(self):
        processor = BatchProcessor(
            _mock_analyzer(fail_ids={"m1", "m2"}), concurrency=2, sleep=MagicMock()
        )

        batch = processor.process_batch(_emails(2))

        assert batch.results == []
        assert batch.statistics.processed_emails == 0
        assert batch.statistics.average_time_per_email == 0.0

    def test_empty_batch(self):
        sleep = MagicMock()
        processor = BatchProcessor(_mock_analyzer(), sleep=sleep)

        batch = processor.process_batch([])

        assert batch.results == []
        assert batch.statistics.total_emails == 0
        sleep.assert_not_called()

    def test_results_are_scored(self):
        processor = BatchProcessor(_mock_analyzer(), sleep=MagicMock())

        result = processor.process_batch(_emails(1)).results[0]

        assert result.priority_score == 60
        assert result.needs_attention is False
        assert result.processing_time >= 0

    def test_to_dict(self):
        processor = BatchProcessor(_mock_analyzer(fail_ids={"m2"}), sleep=MagicMock())

        data = processor.process_batch(_emails(2)).to_dict()

        assert data["statistics"]["failedEmails"] == 1
        assert data["errors"][0]["emailId"] == "m2"
        assert data["results"][0]["emailId"] == "m1"

    def test_empty_result_helper(self):
        assert BatchResult.empty().statistics.total_emails == 0


class TestProcessingStats:
    """Tests for processing_stats() and reset()."""

    def test_stats_accumulate_across_batches(self):
        processor = BatchProcessor(_mock_analyzer(fail_ids={"m2"}), sleep=MagicMock())

        processor.process_batch(_emails(3))
        processor.process_batch(_emails(2))
        stats = processor.processing_stats()

        assert stats["totalProcessed"] == 3
        assert stats["errors"] == 2
        assert [e["emailId"] for e in stats["recentErrors"]] == ["m2", "m2"]
        assert stats["serviceStats"]["rateLimitStatus"] == "available"

    def test_reset(self):
        processor = BatchProcessor(_mock_analyzer(fail_ids={"m1"}), sleep=MagicMock())
        processor.process_batch(_emails(2))

        processor.reset()
        stats = processor.processing_stats()

        assert stats["totalProcessed"] == 0
        assert stats["errors"] == 0


class TestBatchWithRealAnalyzer:
    """BatchProcessor over a real EmailAnalyzer and a scripted adapter."""

    def test_invalid_email_fails_alone(self):
        clock = FakeClock()
        adapter = FakeAdapter()
        oracle = AnalysisOracle(
            adapter,
            cache=AnalysisCache(clock=clock),
            rate_limiter=RateLimiter(max_requests=100, window=60, clock=clock),
            clock=clock,
        )
        processor = BatchProcessor(EmailAnalyzer(oracle), concurrency=2, sleep=MagicMock())
        emails = _emails(4)
        emails[2] = make_email(id="bad", body=None, subject=123)

        batch = processor.process_batch(emails)

        assert [r.email_id for r in batch.results] == ["m1", "m2", "m4"]
        assert batch.errors[0].email_id == "bad"
        assert batch.errors[0].kind == "content_validation"
        # Default scripted analysis: 8*10 + 5 + 20 + 15 + 25 = 145 -> 100
        assert all(r.priority_score == 100 for r in batch.results)
        assert all(r.needs_attention for r in batch.results)
        oracle.close()

    def test_full_group_fits_within_call_deadline(self):
        """Four emails at once make 20 calls; none may time out waiting for a worker."""
        adapter = FakeAdapter(delay=0.3)
        oracle = AnalysisOracle(
            adapter,
            rate_limiter=RateLimiter(max_requests=100, window=60),
            timeout=0.5,
        )
        processor = BatchProcessor(EmailAnalyzer(oracle), concurrency=4, sleep=MagicMock())

        batch = processor.process_batch(_emails(4))

        assert batch.errors == []
        assert adapter.call_count == 20
        assert [r.analysis.fallback_kinds for r in batch.results] == [[], [], [], []]
        oracle.close()
