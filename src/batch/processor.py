"""BatchProcessor: runs EmailAnalyzer over many emails in throttled groups."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, Sequence

from src.analyzer import AnalyzerError, EmailAnalyzer
from src.fetcher import Email
from src.scoring import PriorityScorer, ScoredEmail

from .models import BatchError, BatchResult, BatchStatistics

logger = logging.getLogger(__name__)

MAX_RECENT_ERRORS = 100


def chunked(items: Sequence[Email], size: int) -> list[Sequence[Email]]:
    """Split items into consecutive groups of at most size."""
    return [items[i : i + size] for i in range(0, len(items), size)]


def _elapsed_ms(start: float) -> int:
    return int(round((time.monotonic() - start) * 1000))


class BatchProcessor:
    """Analyzes and scores a collection of emails.

    Emails are processed in consecutive groups of ``concurrency``; every
    email in a group runs at the same time, and a fixed ``delay`` separates
    one group from the next to stay under the oracle's rate window. The
    delay is applied whether or not the limiter denied anything.

    A failing email is logged, recorded as a BatchError and left out of the
    results; it never aborts its siblings or the batch. Results keep the
    input order of the emails.

    Example usage:
        processor = BatchProcessor(analyzer)
        batch = processor.process_batch(emails)
        print(batch.statistics.processed_emails, "of", batch.statistics.total_emails)
    """

    def __init__(
        self,
        analyzer: EmailAnalyzer,
        scorer: Optional[PriorityScorer] = None,
        concurrency: int = 3,
        delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the BatchProcessor.

        Args:
            analyzer: Analyzer used for each email.
            scorer: Priority scorer. Defaults to standard weights.
            concurrency: Emails analyzed at once per group.
            delay: Seconds to pause between groups.
            sleep: Sleep function (injectable for tests).
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._analyzer = analyzer
        self._scorer = scorer or PriorityScorer()
        self._concurrency = concurrency
        self._delay = delay
        self._sleep = sleep
        self._lock = threading.Lock()
        self._total_processed = 0
        self._errors: list[BatchError] = []

    def process_email(self, email: Email) -> ScoredEmail:
        """Analyze and score a single email.

        Raises:
            AnalyzerError: If the email cannot be analyzed at all.
        """
        start = time.monotonic()
        analysis = self._analyzer.analyze(email)
        return self._scorer.score_email(analysis, processing_time=_elapsed_ms(start))

    def _record_error(self, email: Email, exc: Exception) -> BatchError:
        if isinstance(exc, AnalyzerError):
            error = BatchError(email_id=email.id, kind=exc.kind, message=exc.public_message)
        else:
            error = BatchError(
                email_id=email.id, kind="internal_error", message="Email analysis failed"
            )
        with self._lock:
            self._errors.append(error)
            del self._errors[:-MAX_RECENT_ERRORS]
        return error

    def _process_group(self, group: Sequence[Email]) -> tuple[list[ScoredEmail], list[BatchError]]:
        results: list[ScoredEmail] = []
        errors: list[BatchError] = []
        with ThreadPoolExecutor(max_workers=len(group), thread_name_prefix="batch") as pool:
            futures = [(email, pool.submit(self.process_email, email)) for email in group]
            for email, future in futures:
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.exception(
                        "Error processing email %s (%s)",
                        email.id,
                        email.subject,
                        extra={"email_id": email.id},
                    )
                    errors.append(self._record_error(email, e))
        return results, errors

    def process_batch(self, emails: Sequence[Email]) -> BatchResult:
        """Analyze and score every email.

        Args:
            emails: Emails to process.

        Returns:
            BatchResult with successes in input order, statistics and errors.
        """
        batch_start = time.monotonic()
        groups = chunked(list(emails), self._concurrency)
        logger.info("Processing batch of %d emails in %d groups", len(emails), len(groups))

        results: list[ScoredEmail] = []
        errors: list[BatchError] = []
        for index, group in enumerate(groups):
            group_results, group_errors = self._process_group(group)
            results.extend(group_results)
            errors.extend(group_errors)
            logger.debug(
                "Group %d/%d done: %d ok, %d failed",
                index + 1,
                len(groups),
                len(group_results),
                len(group_errors),
            )
            if index < len(groups) - 1 and self._delay > 0:
                self._sleep(self._delay)

        duration = _elapsed_ms(batch_start)
        processed = len(results)
        with self._lock:
            self._total_processed += processed

        statistics = BatchStatistics(
            total_emails=len(emails),
            processed_emails=processed,
            failed_emails=len(emails) - processed,
            processing_time=duration,
            average_time_per_email=duration / processed if processed else 0.0,
        )
        logger.info(
            "Batch completed in %dms: %d processed, %d failed",
            duration,
            processed,
            statistics.failed_emails,
        )
        return BatchResult(results=results, statistics=statistics, errors=errors)

    def processing_stats(self) -> dict[str, Any]:
        """Totals across all batches run by this processor."""
        with self._lock:
            stats = {
                "totalProcessed": self._total_processed,
                "errors": len(self._errors),
                "recentErrors": [e.to_dict() for e in self._errors[-10:]],
            }
        stats["serviceStats"] = self._analyzer.oracle.stats().to_dict()
        return stats

    def reset(self) -> None:
        """Clear accumulated totals and the error log."""
        with self._lock:
            self._total_processed = 0
            self._errors.clear()
