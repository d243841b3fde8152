"""Email analyzer module: turns one email into a composite LLM analysis.

Public API:
    - EmailAnalyzer: Runs the five analysis kinds for one email
    - AnalysisOracle: Cached, rate-limited model access
    - AnalysisCache / RateLimiter: Shared oracle guards
    - LLMAdapter / OpenAIAdapter: Model provider interface and implementation
    - CompositeAnalysis and the five per-kind records
    - AnalyzerError and its subclasses

Example:
    from src.analyzer import AnalysisOracle, EmailAnalyzer, OpenAIAdapter

    analyzer = EmailAnalyzer(AnalysisOracle(OpenAIAdapter()))
    analysis = analyzer.analyze(email)
    print(analysis.importance.importance, analysis.summary.summary)
"""

from .adapter import LLMAdapter
from .cache import AnalysisCache, CacheEntry, make_cache_key
from .content import clean_email_content, format_email_for_analysis, validate_prompt_input
from .email_analyzer import EmailAnalyzer
from .exceptions import (
    AnalyzerError,
    ContentValidationError,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    OracleError,
    OracleTimeoutError,
    RateLimitExceeded,
)
from .models import (
    NO_DEADLINE,
    ActionItem,
    ActionItemsResult,
    AnalysisKind,
    BusinessRelevance,
    Category,
    ClassificationResult,
    CompositeAnalysis,
    Emotion,
    ImportanceResult,
    Message,
    MessageRole,
    Priority,
    Sentiment,
    SentimentResult,
    SummaryResult,
    Tone,
    Urgency,
)
from .openai_adapter import OpenAIAdapter
from .oracle import AnalysisOracle, ServiceStats, parse_json_object
from .rate_limiter import RateLimiter

__all__ = [
    # Main classes
    "EmailAnalyzer",
    "AnalysisOracle",
    "AnalysisCache",
    "RateLimiter",
    "LLMAdapter",
    "OpenAIAdapter",
    "ServiceStats",
    # Helpers
    "CacheEntry",
    "make_cache_key",
    "parse_json_object",
    "clean_email_content",
    "format_email_for_analysis",
    "validate_prompt_input",
    # Models
    "NO_DEADLINE",
    "ActionItem",
    "ActionItemsResult",
    "AnalysisKind",
    "BusinessRelevance",
    "Category",
    "ClassificationResult",
    "CompositeAnalysis",
    "Emotion",
    "ImportanceResult",
    "Message",
    "MessageRole",
    "Priority",
    "Sentiment",
    "SentimentResult",
    "SummaryResult",
    "Tone",
    "Urgency",
    # Exceptions
    "AnalyzerError",
    "ContentValidationError",
    "LLMAuthenticationError",
    "LLMConnectionError",
    "LLMRateLimitError",
    "LLMResponseError",
    "OracleError",
    "OracleTimeoutError",
    "RateLimitExceeded",
]
