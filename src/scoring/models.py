"""Data models for priority scoring and batch insights."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.analyzer.models import ActionItem, CompositeAnalysis


class PriorityTier(Enum):
    """Dashboard grouping by priority score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecommendationType(Enum):
    PRIORITY = "priority"
    DEADLINE = "deadline"
    COMPLAINT = "complaint"
    BATCH = "batch"


class Mood(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class PriorityScore:
    """Output of PriorityScorer.score()."""

    priority_score: int
    needs_attention: bool


@dataclass(frozen=True)
class ScoredEmail:
    """A CompositeAnalysis with its derived priority.

    Attributes:
        analysis: The composite analysis for one email.
        priority_score: Integer in [0, 100].
        needs_attention: Whether any attention predicate fired.
        processing_time: Milliseconds spent analyzing and scoring.
    """

    analysis: CompositeAnalysis
    priority_score: int
    needs_attention: bool
    processing_time: int = 0

    @property
    def email_id(self) -> str:
        return self.analysis.email_id

    def to_dict(self) -> dict[str, Any]:
        data = self.analysis.to_dict()
        data.update(
            {
                "priorityScore": self.priority_score,
                "needsAttention": self.needs_attention,
                "processingTime": self.processing_time,
            }
        )
        return data


@dataclass
class ActionItemSummary:
    """Action items across a batch."""

    total: int = 0
    with_deadlines: int = 0
    high_priority: int = 0
    by_category: dict[str, list[ActionItem]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalActionItems": self.total,
            "withDeadlines": self.with_deadlines,
            "highPriority": self.high_priority,
            "categories": {
                name: [item.to_dict() for item in items]
                for name, items in self.by_category.items()
            },
        }


@dataclass
class SentimentOverview:
    """Sentiment and emotion distribution across a batch."""

    sentiment_distribution: dict[str, int] = field(
        default_factory=lambda: {"positive": 0, "negative": 0, "neutral": 0}
    )
    emotion_distribution: dict[str, int] = field(default_factory=dict)
    complaints: int = 0
    praise: int = 0
    overall_mood: Mood = Mood.NEUTRAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "sentimentDistribution": dict(self.sentiment_distribution),
            "emotionDistribution": dict(self.emotion_distribution),
            "complaints": self.complaints,
            "praise": self.praise,
            "overallMood": self.overall_mood.value,
        }


@dataclass(frozen=True)
class Recommendation:
    """A rule-based suggestion shown on the dashboard."""

    type: RecommendationType
    message: str
    action: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "message": self.message, "action": self.action}


@dataclass
class Insights:
    """Cross-email summary of a completed batch."""

    total_emails: int = 0
    needs_attention: int = 0
    high_priority: int = 0
    medium_priority: int = 0
    low_priority: int = 0
    categories: dict[str, int] = field(default_factory=dict)
    action_items: ActionItemSummary = field(default_factory=ActionItemSummary)
    sentiment: SentimentOverview = field(default_factory=SentimentOverview)
    recommendations: list[Recommendation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalEmails": self.total_emails,
            "needsAttention": self.needs_attention,
            "highPriority": self.high_priority,
            "mediumPriority": self.medium_priority,
            "lowPriority": self.low_priority,
            "categories": dict(self.categories),
            "actionItems": self.action_items.to_dict(),
            "sentimentOverview": self.sentiment.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }
