"""Ordering and threshold helpers over scored emails."""

from typing import Iterable

from .models import ScoredEmail


def rank_by_priority(results: Iterable[ScoredEmail]) -> list[ScoredEmail]:
    """Sort by priority score, highest first. Ties keep input order."""
    return sorted(results, key=lambda r: r.priority_score, reverse=True)


def filter_by_importance(results: Iterable[ScoredEmail], min_importance: int) -> list[ScoredEmail]:
    """Keep results whose importance is at least min_importance.

    Returns:
        Matching results sorted by importance, highest first (stable).
    """
    kept = [r for r in results if r.analysis.importance.importance >= min_importance]
    return sorted(kept, key=lambda r: r.analysis.importance.importance, reverse=True)
