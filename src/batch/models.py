"""Data models for batch processing results."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.scoring.models import ScoredEmail


@dataclass(frozen=True)
class BatchError:
    """One email that could not be analyzed.

    Attributes:
        email_id: ID of the failed email.
        kind: Stable error tag (e.g. "oracle_error", "internal_error").
        message: User-safe message; raw provider text only goes to logs.
        timestamp: When the failure was recorded.
    """

    email_id: str
    kind: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "emailId": self.email_id,
            "error": self.kind,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class BatchStatistics:
    """Counts and timing for one processBatch run.

    processing_time and average_time_per_email are in milliseconds; the
    average is taken over processed emails and is 0 when none succeeded.
    """

    total_emails: int
    processed_emails: int
    failed_emails: int
    processing_time: int
    average_time_per_email: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalEmails": self.total_emails,
            "processedEmails": self.processed_emails,
            "failedEmails": self.failed_emails,
            "processingTime": self.processing_time,
            "averageTimePerEmail": self.average_time_per_email,
        }


@dataclass
class BatchResult:
    """Successful results in input order, plus statistics and errors."""

    results: list[ScoredEmail]
    statistics: BatchStatistics
    errors: list[BatchError] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "BatchResult":
        return cls(
            results=[],
            statistics=BatchStatistics(
                total_emails=0,
                processed_emails=0,
                failed_emails=0,
                processing_time=0,
                average_time_per_email=0.0,
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "statistics": self.statistics.to_dict(),
            "errors": [e.to_dict() for e in self.errors],
        }
