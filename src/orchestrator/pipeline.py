"""TriageOrchestrator - connects modules into a single pipeline run."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from src.analyzer import AnalysisOracle, OpenAIAdapter
from src.batch import BatchProcessor, BatchResult
from src.config import TriageConfig
from src.fetcher import Email, EmailFetcher
from src.fetcher.email_fetcher import DEFAULT_QUERY
from src.filtering import FilterCriteria, SmartFilter
from src.scoring import InsightAggregator, filter_by_importance

from .models import PipelineResult, StepResult

logger = logging.getLogger(__name__)

FETCH_STEP = "fetch"
ANALYZE_STEP = "analyze"
INSIGHTS_STEP = "insights"
IMPORTANT_STEP = "filter_important"
SMART_FILTER_STEP = "smart_filter"


class TriageOrchestrator:
    """Orchestrates the fetch -> analyze -> insights pipeline.

    Each step runs with timing and error isolation; when a step fails the
    steps depending on it are recorded as skipped. Collaborators not passed
    in are built lazily from ``config`` and share one AnalysisOracle.

    Example:
        result = TriageOrchestrator(config=TriageConfig.from_env()).run()
        print(f"Success: {result.success}")
    """

    def __init__(
        self,
        fetcher: Optional[EmailFetcher] = None,
        processor: Optional[BatchProcessor] = None,
        aggregator: Optional[InsightAggregator] = None,
        smart_filter: Optional[SmartFilter] = None,
        config: Optional[TriageConfig] = None,
        max_emails: int = 50,
        query: str = DEFAULT_QUERY,
    ):
        self._fetcher = fetcher
        self._processor = processor
        self._aggregator = aggregator
        self._smart_filter = smart_filter
        self._config = config or TriageConfig()
        self._max_emails = max_emails
        self._query = query
        self._oracle: Optional[AnalysisOracle] = None

    def _get_fetcher(self) -> EmailFetcher:
        if self._fetcher is None:
            self._fetcher = EmailFetcher()
        return self._fetcher

    def _get_oracle(self) -> AnalysisOracle:
        if self._oracle is None:
            config = self._config
            adapter = OpenAIAdapter(
                model=config.oracle.model, timeout=config.oracle.timeout_ms / 1000
            )
            self._oracle = config.build_oracle(adapter)
        return self._oracle

    def _get_processor(self) -> BatchProcessor:
        if self._processor is None:
            config = self._config
            self._processor = config.build_processor(config.build_analyzer(self._get_oracle()))
        return self._processor

    def _get_smart_filter(self) -> SmartFilter:
        if self._smart_filter is None:
            self._smart_filter = self._config.build_smart_filter(self._get_oracle())
        return self._smart_filter

    def _get_aggregator(self) -> InsightAggregator:
        if self._aggregator is None:
            self._aggregator = self._config.build_aggregator()
        return self._aggregator
    @staticmethod
    def _skip_step(name: str) -> StepResult:
        """Record a step as skipped due to a prior failure."""
        return StepResult(
            name=name,
            success=False,
            duration_seconds=0.0,
            details={},
            skipped=True,
        )

    def _run_step(self, name: str, fn: Callable[[], dict[str, Any]]) -> StepResult:
        """Run a pipeline step with timing and error isolation."""
        start = time.monotonic()
        try:
            details = fn()
            duration = time.monotonic() - start
            return StepResult(
                name=name,
                success=True,
                duration_seconds=round(duration, 2),
                details=details,
            )
        except Exception as e:
            duration = time.monotonic() - start
            logger.exception("Step '%s' failed", name, extra={"step": name})
            return StepResult(
                name=name,
                success=False,
                duration_seconds=round(duration, 2),
                details={},
                error=str(e),
            )


    def _fetch(self, result: PipelineResult, remaining: list[str]) -> Optional[list[Email]]:
        """Run the fetch step; on failure mark ``remaining`` skipped and return None."""
        emails: list[Email] = []

        def fetch_step() -> dict:
            nonlocal emails
            fetcher = self._get_fetcher()
            emails = list(fetcher.fetch_recent(query=self._query, max_results=self._max_emails))
            logger.info("Fetched %d emails for query %r", len(emails), self._query)
            return {"emails_fetched": len(emails)}

        fetch_result = self._run_step(FETCH_STEP, fetch_step)
        result.steps.append(fetch_result)
        if not fetch_result.success:
            result.steps.extend(self._skip_step(name) for name in remaining)
            return None
        return emails

    def _fetch_and_analyze(self, result: PipelineResult, remaining: list[str]) -> bool:
        """Run the fetch and analyze steps, storing the batch on result.

        Returns False (after marking ``remaining`` skipped) if either failed.
        """
        emails = self._fetch(result, remaining=[ANALYZE_STEP, *remaining])
        if emails is None:
            return False

        def analyze_step() -> dict:
            if not emails:
                result.batch = BatchResult.empty()
                return {"emails_analyzed": 0, "errors": 0}
            batch = self._get_processor().process_batch(emails)
            result.batch = batch
            return {
                "emails_analyzed": batch.statistics.processed_emails,
                "errors": batch.statistics.failed_emails,
                "processing_time_ms": batch.statistics.processing_time,
            }

        analyze_result = self._run_step(ANALYZE_STEP, analyze_step)
        result.steps.append(analyze_result)
        if not analyze_result.success:
            result.steps.extend(self._skip_step(name) for name in remaining)
            return False
        return True
    def run(self) -> PipelineResult:
        """Execute the full pipeline.

        Steps:
            1. Fetch recent emails
            2. Analyze and score them in throttled groups
            3. Aggregate insights over the batch

        Returns:
            PipelineResult with per-step metrics, the batch and insights.
        """
        result = PipelineResult(started_at=datetime.now(timezone.utc))

        if self._fetch_and_analyze(result, remaining=[INSIGHTS_STEP]):

            def insights_step() -> dict:
                insights = self._get_aggregator().summarize(result.batch.results)
                result.insights = insights
                logger.info(
                    "%d of %d emails need attention, %d recommendations",
                    insights.needs_attention,
                    insights.total_emails,
                    len(insights.recommendations),
                )
                return {
                    "needs_attention": insights.needs_attention,
                    "high_priority": insights.high_priority,
                    "recommendations": len(insights.recommendations),
                }

            result.steps.append(self._run_step(INSIGHTS_STEP, insights_step))

        result.finished_at = datetime.now(timezone.utc)
        return result

    def run_important(self, min_importance: int = 7) -> PipelineResult:
        """Fetch, analyze and keep only emails at or above min_importance.

        Returns:
            PipelineResult whose ``important`` list is sorted by importance,
            highest first.
        """
        result = PipelineResult(started_at=datetime.now(timezone.utc))

        if self._fetch_and_analyze(result, remaining=[IMPORTANT_STEP]):

            def important_step() -> dict:
                result.important = filter_by_importance(result.batch.results, min_importance)
                return {
                    "min_importance": min_importance,
                    "important_emails": len(result.important),
                }

            result.steps.append(self._run_step(IMPORTANT_STEP, important_step))

        result.finished_at = datetime.now(timezone.utc)
        return result

    def run_filter(self, criteria: FilterCriteria) -> PipelineResult:
        """Fetch emails and run each through the smart filter.

        Emails are not analyzed or scored; a filter call that fails leaves
        that email with a non-matching default decision.

        Returns:
            PipelineResult whose ``filtered`` maps email id to its decision,
            in fetch order.
        """
        result = PipelineResult(started_at=datetime.now(timezone.utc))

        emails = self._fetch(result, remaining=[SMART_FILTER_STEP])
        if emails is not None:

            def filter_step() -> dict:
                smart_filter = self._get_smart_filter()
                result.filtered = {
                    email.id: smart_filter.apply_filter(email, criteria) for email in emails
                }
                matches = sum(1 for decision in result.filtered.values() if decision.matches)
                logger.info("%d of %d emails match the filter", matches, len(emails))
                return {"emails_filtered": len(emails), "matches": matches}

            result.steps.append(self._run_step(SMART_FILTER_STEP, filter_step))

        result.finished_at = datetime.now(timezone.utc)
        return result

    def service_stats(self) -> dict[str, Any]:
        """Processing and oracle statistics of the underlying processor."""
        return self._get_processor().processing_stats()
