"""InsightAggregator: cross-email summaries for the dashboard."""

import logging
from collections import Counter
from typing import Optional, Sequence

from src.analyzer.models import Priority, Sentiment

from .models import (
    ActionItemSummary,
    Insights,
    Mood,
    PriorityTier,
    Recommendation,
    RecommendationType,
    ScoredEmail,
    SentimentOverview,
)
from .priority import AttentionThresholds

logger = logging.getLogger(__name__)

DEFAULT_ACTION_CATEGORY = "general"
POSITIVE_MOOD_RATIO = 0.6
NEGATIVE_MOOD_RATIO = 0.4
NEWSLETTER_BATCH_THRESHOLD = 3


class InsightAggregator:
    """Aggregates a batch of ScoredEmail into Insights.

    Pure aggregation: the same results always give the same insights, and
    an empty batch yields zeroed counts with a neutral mood.
    """

    def __init__(self, thresholds: Optional[AttentionThresholds] = None):
        self._thresholds = thresholds or AttentionThresholds()

    def _action_items(self, results: Sequence[ScoredEmail]) -> ActionItemSummary:
        summary = ActionItemSummary()
        for result in results:
            for item in result.analysis.action_items.action_items:
                summary.total += 1
                if item.has_deadline:
                    summary.with_deadlines += 1
                if item.priority == Priority.HIGH:
                    summary.high_priority += 1
                category = item.category or DEFAULT_ACTION_CATEGORY
                summary.by_category.setdefault(category, []).append(item)
        return summary

    @staticmethod
    def overall_mood(distribution: dict[str, int]) -> Mood:
        total = sum(distribution.values())
        if total == 0:
            return Mood.NEUTRAL
        if distribution.get(Sentiment.POSITIVE.value, 0) / total > POSITIVE_MOOD_RATIO:
            return Mood.POSITIVE
        if distribution.get(Sentiment.NEGATIVE.value, 0) / total > NEGATIVE_MOOD_RATIO:
            return Mood.NEGATIVE
        return Mood.NEUTRAL

    def _sentiment(self, results: Sequence[ScoredEmail]) -> SentimentOverview:
        overview = SentimentOverview()
        emotions: Counter[str] = Counter()
        for result in results:
            sentiment = result.analysis.sentiment
            overview.sentiment_distribution[sentiment.sentiment.value] += 1
            emotions[sentiment.emotion.value] += 1
            overview.complaints += sentiment.is_complaint
            overview.praise += sentiment.is_praise
        overview.emotion_distribution = dict(emotions)
        overview.overall_mood = self.overall_mood(overview.sentiment_distribution)
        return overview

    def _recommendations(
        self, results: Sequence[ScoredEmail], high_priority: int
    ) -> list[Recommendation]:
        recommendations = []

        if high_priority:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.PRIORITY,
                    message=f"You have {high_priority} high-priority emails that need immediate attention.",
                    action="Review high-priority emails first",
                )
            )

        with_deadlines = sum(1 for r in results if r.analysis.action_items.has_deadlines)
        if with_deadlines:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.DEADLINE,
                    message=f"{with_deadlines} emails contain deadlines or time-sensitive tasks.",
                    action="Check deadlines and add to calendar",
                )
            )

        complaints = sum(1 for r in results if r.analysis.sentiment.is_complaint)
        if complaints:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.COMPLAINT,
                    message=f"{complaints} emails contain complaints that need attention.",
                    action="Address complaints promptly",
                )
            )

        newsletters = sum(1 for r in results if r.analysis.classification.is_newsletter)
        if newsletters > NEWSLETTER_BATCH_THRESHOLD:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.BATCH,
                    message=f"{newsletters} newsletters can be processed together.",
                    action="Batch process newsletters during downtime",
                )
            )

        return recommendations

    def summarize(self, results: Sequence[ScoredEmail]) -> Insights:
        """Build Insights for a batch of scored emails."""
        tiers = Counter(self._thresholds.tier_for(r.priority_score) for r in results)
        categories = Counter(r.analysis.classification.primary_category.value for r in results)

        insights = Insights(
            total_emails=len(results),
            needs_attention=sum(1 for r in results if r.needs_attention),
            high_priority=tiers[PriorityTier.HIGH],
            medium_priority=tiers[PriorityTier.MEDIUM],
            low_priority=tiers[PriorityTier.LOW],
            categories=dict(categories),
            action_items=self._action_items(results),
            sentiment=self._sentiment(results),
        )
        insights.recommendations = self._recommendations(results, insights.high_priority)

        logger.info(
            "Insights for %d emails: %d high, %d medium, %d low priority",
            insights.total_emails,
            insights.high_priority,
            insights.medium_priority,
            insights.low_priority,
        )
        return insights
