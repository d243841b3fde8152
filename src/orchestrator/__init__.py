"""Pipeline orchestrator for email triage.

Connects EmailFetcher, BatchProcessor, InsightAggregator and SmartFilter
into pipeline runs with per-step error isolation and structured results.
"""

from .models import PipelineResult, StepResult
from .pipeline import TriageOrchestrator

__all__ = [
    "TriageOrchestrator",
    "PipelineResult",
    "StepResult",
]
