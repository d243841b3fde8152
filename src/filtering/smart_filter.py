"""SmartFilter: asks the model whether an email matches caller criteria."""

import json
import logging

from src.analyzer import AnalysisOracle, AnalyzerError, clean_email_content
from src.analyzer.content import DEFAULT_MAX_CONTENT_LENGTH
from src.analyzer.prompts import SMART_FILTER_PROMPT_TEMPLATE
from src.fetcher import Email

from .models import FilterCriteria, FilterResult

logger = logging.getLogger(__name__)

FILTER_KIND = "filter"


class SmartFilter:
    """Evaluates one email against a FilterCriteria with a single oracle call.

    Never raises for oracle or parse problems: any failure returns
    FilterResult.default() (no match, zero confidence, Inbox).
    """

    def __init__(self, oracle: AnalysisOracle, max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH):
        self._oracle = oracle
        self._max_content_length = max_content_length

    def build_prompt(self, email: Email, criteria: FilterCriteria) -> str:
        body = clean_email_content(email.body or "", self._max_content_length)
        content = (
            f"Subject: {email.subject or 'No Subject'}\n"
            f"From: {email.sender or 'Unknown Sender'}\n"
            f"Content: {body}"
        )
        return SMART_FILTER_PROMPT_TEMPLATE.format(
            criteria=json.dumps(criteria.to_dict(), sort_keys=True),
            content=content,
        )

    def apply_filter(self, email: Email, criteria: FilterCriteria) -> FilterResult:
        """Return the match decision for email, or the safe default."""
        try:
            prompt = self.build_prompt(email, criteria)
            result = FilterResult.from_dict(self._oracle.generate_json(prompt, FILTER_KIND))
        except (AnalyzerError, ValueError, TypeError, KeyError) as e:
            logger.warning("Smart filtering failed for email %s: %s", email.id, e)
            return FilterResult.default()

        logger.debug(
            "Email %s filter match=%s confidence=%.2f", email.id, result.matches, result.confidence
        )
        return result
