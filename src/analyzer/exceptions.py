"""Custom exceptions for the analyzer module.

Every error carries a stable ``kind`` tag and a ``public_message`` that is
safe to show to end users. The full message (which may contain raw provider
output) stays in ``str(exc)`` for diagnostic logs.
"""

from typing import Any, Optional


class AnalyzerError(Exception):
    """Base exception for analyzer errors."""

    kind = "analyzer_error"
    public_message = "Email analysis failed"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a structured, user-facing error object."""
        return {"error": self.kind, "message": self.public_message}


class RateLimitExceeded(AnalyzerError):
    """Admission denied by the local rate limiter.

    Attributes:
        retry_after: Seconds until the oldest recorded call leaves the window.
    """

    kind = "rate_limit_exceeded"
    public_message = "Rate limit exceeded. Please try again later."

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.retry_after is not None:
            data["retry_after"] = round(self.retry_after, 3)
        return data


class OracleError(AnalyzerError):
    """The external model call failed or produced unusable output."""

    kind = "oracle_error"
    public_message = "AI analysis failed"


class LLMConnectionError(OracleError):
    """Failed to connect to LLM provider."""

    pass


class LLMAuthenticationError(OracleError):
    """Authentication failed with LLM provider."""

    public_message = "AI provider authentication failed"


class LLMRateLimitError(OracleError):
    """Rate limit exceeded on LLM provider.

    Attributes:
        retry_after: Seconds to wait before retrying, if provided by the API.
    """

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class LLMResponseError(OracleError):
    """LLM returned an invalid or unparseable response.

    Attributes:
        raw_response: The original response that failed to parse.
    """

    def __init__(self, message: str, raw_response: Optional[str] = None):
        super().__init__(message)
        self.raw_response = raw_response


class OracleTimeoutError(OracleError):
    """A single model call exceeded its per-request deadline."""

    public_message = "AI analysis timed out"


class ContentValidationError(AnalyzerError):
    """Input content violated type or size constraints before prompting."""

    kind = "content_validation"

    def __init__(self, message: str):
        super().__init__(message)
        self.public_message = message
