"""Data models for pipeline execution results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from src.batch import BatchResult
from src.filtering import FilterResult
from src.scoring import Insights, ScoredEmail


@dataclass
class StepResult:
    """Result of a single pipeline step."""

    name: str
    success: bool
    duration_seconds: float
    details: dict[str, Any]
    error: Optional[str] = None
    skipped: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = {
            "name": self.name,
            "success": self.success,
            "skipped": self.skipped,
            "durationSeconds": self.duration_seconds,
            "details": self.details,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class PipelineResult:
    """Aggregate result of a full pipeline run.

    ``batch`` and ``insights`` are set once their step has succeeded.
    ``important`` holds the filtered view of an important-messages run and
    ``filtered`` the per-email smart-filter decisions, keyed by email id in
    fetch order.
    """

    started_at: datetime
    finished_at: Optional[datetime] = None
    steps: list[StepResult] = field(default_factory=list)
    batch: Optional[BatchResult] = None
    insights: Optional[Insights] = None
    important: Optional[list[ScoredEmail]] = None
    filtered: Optional[dict[str, FilterResult]] = None

    @property
    def success(self) -> bool:
        return all(step.success for step in self.steps)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
            "steps": [step.to_dict() for step in self.steps],
        }
        if self.batch is not None:
            data["batch"] = self.batch.to_dict()
        if self.insights is not None:
            data["insights"] = self.insights.to_dict()
        if self.important is not None:
            data["important"] = [r.to_dict() for r in self.important]
        if self.filtered is not None:
            data["filtered"] = [
                {"emailId": email_id, **decision.to_dict()}
                for email_id, decision in self.filtered.items()
            ]
        return data
