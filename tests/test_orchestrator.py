"""Unit tests for the TriageOrchestrator and the CLI."""

import json
import os
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from src.analyzer import AnalysisCache, AnalysisOracle, LLMConnectionError, RateLimiter
from src.batch import BatchProcessor
from src.config import TriageConfig
from src.filtering import FilterCriteria, FilterResult, SmartFilter
from src.orchestrator import PipelineResult, StepResult, TriageOrchestrator
from src.scoring import InsightAggregator
from tests.analysis_test_helpers import (
    DEFAULT_RESPONSES,
    FakeAdapter,
    FakeClock,
    make_analysis,
    make_email,
)


def _analyzer(importance_by_id=None, fail_ids=()):
    importance_by_id = importance_by_id or {}
    analyzer = MagicMock()

    def analyze(email):
        if email.id in fail_ids:
            raise RuntimeError("analysis blew up")
        return make_analysis(email_id=email.id, importance=importance_by_id.get(email.id, 5))

    analyzer.analyze.side_effect = analyze
    return analyzer


def _fetcher(emails):
    fetcher = MagicMock()
    fetcher.fetch_recent.return_value = iter(emails)
    return fetcher


def _make_orchestrator(fetcher, analyzer=None, **kwargs):
    processor = BatchProcessor(analyzer or _analyzer(), concurrency=2, sleep=MagicMock())
    return TriageOrchestrator(
        fetcher=fetcher, processor=processor, aggregator=InsightAggregator(), **kwargs
    )


class TestStepResult:
    def test_successful_step(self):
        step = StepResult(name="fetch", success=True, duration_seconds=1.5, details={"n": 3})
        assert step.error is None
        assert step.skipped is False

    def test_to_dict(self):
        step = StepResult(
            name="fetch", success=False, duration_seconds=0.1, details={}, error="refused"
        )
        assert step.to_dict() == {
            "name": "fetch",
            "success": False,
            "skipped": False,
            "durationSeconds": 0.1,
            "details": {},
            "error": "refused",
        }


class TestPipelineResult:
    def test_success_when_all_steps_pass(self):
        result = PipelineResult(started_at=datetime.now(timezone.utc))
        result.steps = [
            StepResult(name="fetch", success=True, duration_seconds=1.0, details={}),
            StepResult(name="analyze", success=True, duration_seconds=2.0, details={}),
        ]
        assert result.success is True

    def test_failure_when_any_step_fails(self):
        result = PipelineResult(started_at=datetime.now(timezone.utc))
        result.steps = [
            StepResult(name="fetch", success=True, duration_seconds=1.0, details={}),
            StepResult(name="analyze", success=False, duration_seconds=0.1, details={}),
        ]
        assert result.success is False

    def test_success_with_no_steps(self):
        assert PipelineResult(started_at=datetime.now(timezone.utc)).success is True


class TestTriageOrchestrator:
    """Tests for TriageOrchestrator.run()."""

    def test_full_pipeline_success(self):
        emails = [make_email(id="m1"), make_email(id="m2")]
        orchestrator = _make_orchestrator(
            _fetcher(emails), _analyzer(importance_by_id={"m1": 9})
        )

        result = orchestrator.run()

        assert result.success is True
        assert [s.name for s in result.steps] == ["fetch", "analyze", "insights"]
        assert result.steps[0].details["emails_fetched"] == 2
        assert result.steps[1].details["emails_analyzed"] == 2
        assert result.steps[1].details["errors"] == 0
        assert result.steps[2].details["needs_attention"] == 1
        assert [r.email_id for r in result.batch.results] == ["m1", "m2"]
        assert result.insights.total_emails == 2
        assert result.insights.high_priority == 1
        assert result.finished_at is not None

    def test_no_emails_returns_success(self):
        orchestrator = _make_orchestrator(_fetcher([]))

        result = orchestrator.run()

        assert result.success is True
        assert result.steps[1].details["emails_analyzed"] == 0
        assert result.insights.total_emails == 0

    def test_fetch_failure_skips_later_steps(self):
        fetcher = MagicMock()
        fetcher.fetch_recent.side_effect = RuntimeError("Gmail API down")
        orchestrator = _make_orchestrator(fetcher)

        result = orchestrator.run()

        assert result.success is False
        assert result.steps[0].error == "Gmail API down"
        assert [s.skipped for s in result.steps] == [False, True, True]
        assert result.batch is None
        assert result.insights is None

    def test_single_email_failure_is_isolated(self):
        emails = [make_email(id="m1"), make_email(id="m2"), make_email(id="m3")]
        orchestrator = _make_orchestrator(_fetcher(emails), _analyzer(fail_ids={"m2"}))

        result = orchestrator.run()

        assert result.success is True
        assert result.steps[1].details["emails_analyzed"] == 2
        assert result.steps[1].details["errors"] == 1
        assert result.batch.errors[0].email_id == "m2"

    def test_insights_failure_is_isolated(self):
        aggregator = MagicMock()
        aggregator.summarize.side_effect = RuntimeError("aggregation bug")
        orchestrator = TriageOrchestrator(
            fetcher=_fetcher([make_email()]),
            processor=BatchProcessor(_analyzer(), sleep=MagicMock()),
            aggregator=aggregator,
        )

        result = orchestrator.run()

        assert result.success is False
        assert result.steps[1].success is True
        assert result.steps[2].success is False
        assert "aggregation bug" in result.steps[2].error
        assert result.batch is not None

    def test_query_and_max_emails_passed_to_fetcher(self):
        fetcher = _fetcher([])
        orchestrator = _make_orchestrator(fetcher, max_emails=10, query="is:unread")

        orchestrator.run()

        fetcher.fetch_recent.assert_called_once_with(query="is:unread", max_results=10)

    def test_to_dict(self):
        orchestrator = _make_orchestrator(_fetcher([make_email(id="m1")]))

        data = orchestrator.run().to_dict()

        assert data["success"] is True
        assert data["batch"]["statistics"]["processedEmails"] == 1
        assert data["insights"]["totalEmails"] == 1
        assert "important" not in data
        json.dumps(data)

    def test_lazy_init_builds_from_config(self):
        """Collaborators not passed in are built from the config."""
        config = TriageConfig.for_environment("test")
        orchestrator = TriageOrchestrator(config=config)

        with patch("src.orchestrator.pipeline.EmailFetcher") as mock_fetcher_cls:
            orchestrator._get_fetcher()
            mock_fetcher_cls.assert_called_once()

        with patch("src.orchestrator.pipeline.OpenAIAdapter") as mock_adapter_cls:
            processor = orchestrator._get_processor()
            assert orchestrator._get_processor() is processor
            mock_adapter_cls.assert_called_once_with(model="gpt-4o-mini", timeout=15.0)

        oracle = processor._analyzer.oracle
        assert oracle.cache is None
        assert oracle.rate_limiter.max_requests == 10
        oracle.close()


class TestRunImportant:
    """Tests for TriageOrchestrator.run_important()."""

    def test_filters_and_sorts_by_importance(self):
        emails = [make_email(id=f"m{i}") for i in range(1, 5)]
        importance = {"m1": 6, "m2": 9, "m3": 7, "m4": 10}
        orchestrator = _make_orchestrator(_fetcher(emails), _analyzer(importance_by_id=importance))

        result = orchestrator.run_important(min_importance=7)

        assert result.success is True
        assert [s.name for s in result.steps] == ["fetch", "analyze", "filter_important"]
        assert [r.email_id for r in result.important] == ["m4", "m2", "m3"]
        assert result.steps[2].details == {"min_importance": 7, "important_emails": 3}
        assert result.insights is None

    def test_fetch_failure_skips_filter(self):
        fetcher = MagicMock()
        fetcher.fetch_recent.side_effect = RuntimeError("down")
        orchestrator = _make_orchestrator(fetcher)

        result = orchestrator.run_important()

        assert [s.name for s in result.steps] == ["fetch", "analyze", "filter_important"]
        assert result.steps[2].skipped is True
        assert result.important is None


def _smart_filter(adapter):
    clock = FakeClock()
    oracle = AnalysisOracle(
        adapter,
        cache=AnalysisCache(clock=clock),
        rate_limiter=RateLimiter(max_requests=60, window=60, clock=clock),
        clock=clock,
    )
    return SmartFilter(oracle)


def _filter_on_subject(prompt):
    if "Subject: Urgent" in prompt:
        return DEFAULT_RESPONSES["filter"]
    return dict(DEFAULT_RESPONSES["filter"], matches=False, matchedCriteria=[], confidence=0.1)


class TestRunFilter:
    """Tests for TriageOrchestrator.run_filter()."""

    def test_decisions_keyed_by_email_in_fetch_order(self):
        emails = [
            make_email(id="m1", subject="Lunch?"),
            make_email(id="m2", subject="Urgent: server down"),
            make_email(id="m3", subject="Newsletter"),
        ]
        adapter = FakeAdapter({"filter": _filter_on_subject})
        orchestrator = TriageOrchestrator(
            fetcher=_fetcher(emails), smart_filter=_smart_filter(adapter)
        )

        result = orchestrator.run_filter(FilterCriteria(keywords=("urgent",)))

        assert result.success is True
        assert [s.name for s in result.steps] == ["fetch", "smart_filter"]
        assert list(result.filtered) == ["m1", "m2", "m3"]
        assert [d.matches for d in result.filtered.values()] == [False, True, False]
        assert result.steps[1].details == {"emails_filtered": 3, "matches": 1}
        assert adapter.calls_for("filter") == 3
        assert adapter.calls_for("importance") == 0
        assert result.batch is None

    def test_failed_filter_call_defaults_to_no_match(self):
        adapter = FakeAdapter({"filter": LLMConnectionError("down")})
        orchestrator = TriageOrchestrator(
            fetcher=_fetcher([make_email(id="m1")]), smart_filter=_smart_filter(adapter)
        )

        result = orchestrator.run_filter(FilterCriteria(keywords=("urgent",)))

        assert result.success is True
        assert result.filtered["m1"] == FilterResult.default()

    def test_fetch_failure_skips_filter(self):
        fetcher = MagicMock()
        fetcher.fetch_recent.side_effect = RuntimeError("down")
        smart_filter = MagicMock()
        orchestrator = TriageOrchestrator(fetcher=fetcher, smart_filter=smart_filter)

        result = orchestrator.run_filter(FilterCriteria())

        assert [s.name for s in result.steps] == ["fetch", "smart_filter"]
        assert result.steps[1].skipped is True
        assert result.filtered is None
        smart_filter.apply_filter.assert_not_called()

    def test_to_dict_lists_decisions(self):
        orchestrator = TriageOrchestrator(
            fetcher=_fetcher([make_email(id="m1")]), smart_filter=_smart_filter(FakeAdapter())
        )

        data = orchestrator.run_filter(FilterCriteria(keywords=("urgent",))).to_dict()

        assert data["filtered"][0]["emailId"] == "m1"
        assert data["filtered"][0]["matches"] is True
        assert data["filtered"][0]["suggestedFolder"] == "Priority Inbox"
        json.dumps(data)

    def test_filter_and_processor_share_one_oracle(self):
        orchestrator = TriageOrchestrator(config=TriageConfig.for_environment("test"))

        with patch("src.orchestrator.pipeline.OpenAIAdapter") as mock_adapter_cls:
            smart_filter = orchestrator._get_smart_filter()
            processor = orchestrator._get_processor()
            mock_adapter_cls.assert_called_once()

        assert smart_filter._oracle is processor._analyzer.oracle
        smart_filter._oracle.close()


class TestRunTriageCLI:
    """Tests for the run_triage command-line entry point."""

    @pytest.fixture(autouse=True)
    def _quiet_cli(self):
        with patch("run_triage.load_dotenv"), patch("run_triage.configure_logging"), patch.dict(
            os.environ, {}, clear=True
        ):
            yield

    @staticmethod
    def _result(success=True):
        result = PipelineResult(started_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
        result.steps = [StepResult(name="fetch", success=success, duration_seconds=0.1, details={})]
        result.finished_at = datetime(2025, 1, 1, 0, 0, 1, tzinfo=timezone.utc)
        return result

    def test_main_returns_zero_on_success(self):
        from run_triage import main

        with patch("run_triage.TriageOrchestrator") as mock_cls:
            mock_cls.return_value.run.return_value = self._result(success=True)
            with patch("sys.argv", ["run_triage.py"]):
                assert main() == 0

    def test_main_returns_one_on_failure(self):
        from run_triage import main

        with patch("run_triage.TriageOrchestrator") as mock_cls:
            mock_cls.return_value.run.return_value = self._result(success=False)
            with patch("sys.argv", ["run_triage.py"]):
                assert main() == 1

    def test_arguments_passed_to_orchestrator(self):
        from run_triage import main

        with patch("run_triage.TriageOrchestrator") as mock_cls:
            mock_cls.return_value.run.return_value = self._result()
            with patch("sys.argv", ["run_triage.py", "--max-emails", "10", "--query", "is:unread"]):
                main()

        kwargs = mock_cls.call_args.kwargs
        assert kwargs["max_emails"] == 10
        assert kwargs["query"] == "is:unread"
        assert kwargs["config"].environment == "development"

    def test_min_importance_runs_important_view(self):
        from run_triage import main

        with patch("run_triage.TriageOrchestrator") as mock_cls:
            mock_cls.return_value.run_important.return_value = self._result()
            with patch("sys.argv", ["run_triage.py", "--min-importance", "8"]):
                assert main() == 0

        mock_cls.return_value.run_important.assert_called_once_with(min_importance=8)
        mock_cls.return_value.run.assert_not_called()

    def test_json_output(self, capsys):
        from run_triage import main

        with patch("run_triage.TriageOrchestrator") as mock_cls:
            mock_cls.return_value.run.return_value = self._result()
            with patch("sys.argv", ["run_triage.py", "--json"]):
                main()

        data = json.loads(capsys.readouterr().out)
        assert data["success"] is True
        assert data["steps"][0]["name"] == "fetch"

    def test_summary_includes_service_stats(self, capsys):
        from run_triage import main

        result = self._result()
        result.batch = BatchProcessor(_analyzer(), sleep=MagicMock()).process_batch([make_email()])
        stats = {
            "totalProcessed": 1,
            "errors": 0,
            "recentErrors": [],
            "serviceStats": {
                "cacheSize": 5,
                "recentRequestCount": 5,
                "rateLimitStatus": "available",
                "totalRequests": 5,
                "cacheHits": 0,
            },
        }
        with patch("run_triage.TriageOrchestrator") as mock_cls:
            mock_cls.return_value.run.return_value = result
            mock_cls.return_value.service_stats.return_value = stats
            with patch("sys.argv", ["run_triage.py"]):
                assert main() == 0

        out = capsys.readouterr().out
        assert "model requests: 5, cache hits: 0" in out
        assert "Result: SUCCESS" in out

    def test_invalid_config_exits_with_error(self):
        from run_triage import main

        with patch.dict(os.environ, {"TRIAGE_BATCH_CONCURRENCY": "many"}), patch(
            "run_triage.TriageOrchestrator"
        ) as mock_cls:
            with patch("sys.argv", ["run_triage.py"]):
                assert main() == 1
        mock_cls.assert_not_called()

    def test_filter_option_runs_smart_filter(self, capsys):
        from run_triage import main

        result = self._result()
        result.filtered = {
            "m1": FilterResult.from_dict(DEFAULT_RESPONSES["filter"]),
            "m2": FilterResult.default(),
        }
        with patch("run_triage.TriageOrchestrator") as mock_cls:
            mock_cls.return_value.run_filter.return_value = result
            with patch(
                "sys.argv",
                ["run_triage.py", "--filter", '{"keywords": ["urgent"], "minImportance": 7}'],
            ):
                assert main() == 0

        criteria = mock_cls.return_value.run_filter.call_args.args[0]
        assert criteria == FilterCriteria(min_importance=7, keywords=("urgent",))
        mock_cls.return_value.run.assert_not_called()
        out = capsys.readouterr().out
        assert "m1 -> Priority Inbox (0.80)" in out
        assert "m2 ->" not in out

    @pytest.mark.parametrize("raw", ["{not json", '["urgent"]'])
    def test_invalid_filter_exits_with_error(self, raw, capsys):
        from run_triage import main

        with patch("run_triage.TriageOrchestrator") as mock_cls:
            with patch("sys.argv", ["run_triage.py", "--filter", raw]):
                assert main() == 1

        mock_cls.assert_not_called()
        assert "invalid --filter" in capsys.readouterr().err
