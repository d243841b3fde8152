"""Main EmailAnalyzer class running the five analyses for one email."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable

from src.fetcher import Email

from .content import (
    DEFAULT_MAX_CONTENT_LENGTH,
    DEFAULT_MAX_PROMPT_LENGTH,
    format_email_for_analysis,
)
from .exceptions import AnalyzerError
from .models import (
    ActionItemsResult,
    AnalysisKind,
    ClassificationResult,
    CompositeAnalysis,
    ImportanceResult,
    SentimentResult,
    SummaryResult,
)
from .oracle import AnalysisOracle
from .prompts import (
    ACTION_ITEMS_PROMPT_TEMPLATE,
    CLASSIFICATION_PROMPT_TEMPLATE,
    IMPORTANCE_PROMPT_TEMPLATE,
    SENTIMENT_PROMPT_TEMPLATE,
    SUMMARY_PROMPT_TEMPLATE,
)

logger = logging.getLogger(__name__)

# Parse failures surface as one of these; anything else is a bug and propagates.
_RECOVERABLE = (AnalyzerError, ValueError, TypeError, KeyError)

_RECORD_TYPES: dict[AnalysisKind, Any] = {
    AnalysisKind.IMPORTANCE: ImportanceResult,
    AnalysisKind.SUMMARY: SummaryResult,
    AnalysisKind.ACTIONS: ActionItemsResult,
    AnalysisKind.SENTIMENT: SentimentResult,
    AnalysisKind.CLASSIFICATION: ClassificationResult,
}


class EmailAnalyzer:
    """Produces a CompositeAnalysis for one email.

    The five kind-specific oracle calls are independent and are issued
    concurrently, so total latency is close to the slowest single call.
    A kind that fails (rate limit, model error, bad JSON, bad field) is
    replaced by its default record and logged; the composite still succeeds.

    Example usage:
        analyzer = EmailAnalyzer(AnalysisOracle(OpenAIAdapter()))
        analysis = analyzer.analyze(email)
        print(analysis.importance.importance, analysis.summary.summary)
    """

    def __init__(
        self,
        oracle: AnalysisOracle,
        max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
        max_prompt_length: int = DEFAULT_MAX_PROMPT_LENGTH,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """Initialize the EmailAnalyzer.

        Args:
            oracle: Oracle used for every model call.
            max_content_length: Body length kept before truncation.
            max_prompt_length: Upper bound on the formatted content block.
            clock: Source of the analyzed_at timestamp.
        """
        self._oracle = oracle
        self._max_content_length = max_content_length
        self._max_prompt_length = max_prompt_length
        self._clock = clock

    def _build_prompts(self, email: Email, content: str) -> dict[AnalysisKind, str]:
        return {
            AnalysisKind.IMPORTANCE: IMPORTANCE_PROMPT_TEMPLATE.format(content=content),
            AnalysisKind.SUMMARY: SUMMARY_PROMPT_TEMPLATE.format(content=content),
            AnalysisKind.ACTIONS: ACTION_ITEMS_PROMPT_TEMPLATE.format(content=content),
            AnalysisKind.SENTIMENT: SENTIMENT_PROMPT_TEMPLATE.format(content=content),
            AnalysisKind.CLASSIFICATION: CLASSIFICATION_PROMPT_TEMPLATE.format(
                subject=email.subject or "No Subject", content=content
            ),
        }

    def _run_kind(self, email_id: str, kind: AnalysisKind, prompt: str) -> tuple[Any, bool]:
        """Run one analysis kind, returning (record, used_default)."""
        record_type = _RECORD_TYPES[kind]
        try:
            data = self._oracle.generate_json(prompt, kind.value)
            return record_type.from_dict(data), False
        except _RECOVERABLE as e:
            logger.warning(
                "Falling back to default %s analysis for email %s: %s",
                kind.value,
                email_id,
                e,
                extra={"email_id": email_id, "kind": kind.value},
            )
            return record_type.default(), True

    def analyze(self, email: Email) -> CompositeAnalysis:
        """Analyze an email across all five kinds.

        Args:
            email: Email object to analyze.

        Returns:
            CompositeAnalysis with every record fully populated.

        Raises:
            ContentValidationError: If the email's fields cannot be prompted.
        """
        content = format_email_for_analysis(
            email, self._max_content_length, self._max_prompt_length
        )
        prompts = self._build_prompts(email, content)

        with ThreadPoolExecutor(max_workers=len(prompts), thread_name_prefix="analyze") as pool:
            futures = {
                kind: pool.submit(self._run_kind, email.id, kind, prompt)
                for kind, prompt in prompts.items()
            }
            outcomes = {kind: future.result() for kind, future in futures.items()}

        fallbacks = [kind.value for kind, (_, used_default) in outcomes.items() if used_default]
        if fallbacks:
            logger.info("Email %s analyzed with defaults for: %s", email.id, ", ".join(fallbacks))

        return CompositeAnalysis(
            email_id=email.id,
            timestamp=email.timestamp,
            importance=outcomes[AnalysisKind.IMPORTANCE][0],
            summary=outcomes[AnalysisKind.SUMMARY][0],
            action_items=outcomes[AnalysisKind.ACTIONS][0],
            sentiment=outcomes[AnalysisKind.SENTIMENT][0],
            classification=outcomes[AnalysisKind.CLASSIFICATION][0],
            analyzed_at=self._clock(),
            fallback_kinds=fallbacks,
        )

    @property
    def oracle(self) -> AnalysisOracle:
        """Access the underlying oracle."""
        return self._oracle
