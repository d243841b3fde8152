"""Priority scoring and batch insights.

Public API:
    - PriorityScorer: Composite analysis -> priority score + attention flag
    - ScoringWeights / AttentionThresholds: Scoring configuration
    - InsightAggregator: Batch of scored emails -> Insights
    - rank_by_priority / filter_by_importance: Ordering helpers
    - ScoredEmail, Insights and their parts
"""

from .insights import InsightAggregator
from .models import (
    ActionItemSummary,
    Insights,
    Mood,
    PriorityScore,
    PriorityTier,
    Recommendation,
    RecommendationType,
    ScoredEmail,
    SentimentOverview,
)
from .priority import AttentionThresholds, PriorityScorer, ScoringWeights
from .ranking import filter_by_importance, rank_by_priority

__all__ = [
    "PriorityScorer",
    "ScoringWeights",
    "AttentionThresholds",
    "InsightAggregator",
    "rank_by_priority",
    "filter_by_importance",
    "ActionItemSummary",
    "Insights",
    "Mood",
    "PriorityScore",
    "PriorityTier",
    "Recommendation",
    "RecommendationType",
    "ScoredEmail",
    "SentimentOverview",
]
