"""Deterministic priority scoring of a composite analysis."""

import math
from dataclasses import dataclass
from typing import Optional

from src.analyzer.models import BusinessRelevance, CompositeAnalysis, Emotion, Urgency

from .models import PriorityScore, PriorityTier, ScoredEmail

MIN_SCORE = 0
MAX_SCORE = 100


@dataclass(frozen=True)
class ScoringWeights:
    """Weights applied by PriorityScorer, in application order."""

    base_multiplier: float = 10
    action_item_increment: float = 5
    deadline_bonus: float = 20
    response_bonus: float = 15
    relevance_bonus: tuple[tuple[BusinessRelevance, float], ...] = (
        (BusinessRelevance.HIGH, 25),
        (BusinessRelevance.MEDIUM, 10),
        (BusinessRelevance.LOW, 0),
    )
    automated_factor: float = 0.3
    promotion_factor: float = 0.3
    newsletter_factor: float = 0.2
    complaint_bonus: float = 30
    emotion_bonus: float = 20
    bonus_emotions: frozenset[Emotion] = frozenset({Emotion.ANGRY, Emotion.FRUSTRATED})


@dataclass(frozen=True)
class AttentionThresholds:
    """Cutoffs for needs_attention and for the dashboard tiers."""

    importance_cutoff: int = 8
    urgent_levels: frozenset[Urgency] = frozenset({Urgency.HIGH, Urgency.CRITICAL})
    high_tier: int = 70
    medium_tier: int = 40

    def tier_for(self, score: int) -> PriorityTier:
        if score >= self.high_tier:
            return PriorityTier.HIGH
        if score >= self.medium_tier:
            return PriorityTier.MEDIUM
        return PriorityTier.LOW


class PriorityScorer:
    """Maps a CompositeAnalysis to a bounded priority score.

    Pure and deterministic. Additive bonuses build a subtotal, the
    automated/promotion and newsletter dampeners multiply it in turn
    (both may apply), complaint and emotion bonuses are added after
    dampening, and the result is rounded half up and clamped to [0, 100].

    needs_attention uses its own predicates, so a low score can still
    need attention and vice versa.
    """

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        thresholds: Optional[AttentionThresholds] = None,
    ):
        self._weights = weights or ScoringWeights()
        self._thresholds = thresholds or AttentionThresholds()

    def priority_score(self, analysis: CompositeAnalysis) -> int:
        w = self._weights
        importance = analysis.importance
        actions = analysis.action_items
        classification = analysis.classification
        sentiment = analysis.sentiment

        score = importance.importance * w.base_multiplier
        score += len(actions.action_items) * w.action_item_increment
        if actions.has_deadlines:
            score += w.deadline_bonus
        if actions.requires_response:
            score += w.response_bonus
        score += dict(w.relevance_bonus).get(classification.business_relevance, 0)

        if classification.is_automated:
            score *= w.automated_factor
        elif classification.is_promotion:
            score *= w.promotion_factor
        if classification.is_newsletter:
            score *= w.newsletter_factor

        if sentiment.is_complaint:
            score += w.complaint_bonus
        if sentiment.emotion in w.bonus_emotions:
            score += w.emotion_bonus

        return min(max(math.floor(score + 0.5), MIN_SCORE), MAX_SCORE)

    def needs_attention(self, analysis: CompositeAnalysis) -> bool:
        t = self._thresholds
        return (
            analysis.importance.importance >= t.importance_cutoff
            or analysis.importance.urgency in t.urgent_levels
            or analysis.action_items.has_deadlines
            or analysis.action_items.requires_response
            or analysis.sentiment.is_complaint
            or analysis.classification.business_relevance == BusinessRelevance.HIGH
        )

    def score(self, analysis: CompositeAnalysis) -> PriorityScore:
        """Score an analysis.

        Returns:
            PriorityScore with priority_score in [0, 100] and needs_attention.
        """
        return PriorityScore(
            priority_score=self.priority_score(analysis),
            needs_attention=self.needs_attention(analysis),
        )

    def score_email(self, analysis: CompositeAnalysis, processing_time: int = 0) -> ScoredEmail:
        """Score an analysis and wrap it as a ScoredEmail."""
        result = self.score(analysis)
        return ScoredEmail(
            analysis=analysis,
            priority_score=result.priority_score,
            needs_attention=result.needs_attention,
            processing_time=processing_time,
        )

    @property
    def thresholds(self) -> AttentionThresholds:
        return self._thresholds
