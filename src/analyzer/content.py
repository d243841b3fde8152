"""Email content normalization before prompting."""

import re
from typing import Any

from src.fetcher import Email

from .exceptions import ContentValidationError

DEFAULT_MAX_CONTENT_LENGTH = 4000
DEFAULT_MAX_PROMPT_LENGTH = 10000
TRUNCATION_MARKER = "..."

_WHITESPACE = re.compile(r"\s+")
_SIGNATURE_PATTERNS = (
    re.compile(r"--[\s\S]*$"),
    re.compile(r"Sent from my (?:iPhone|iPad|Android|mobile device)[\s\S]*$", re.IGNORECASE),
    re.compile(r"Best regards[\s\S]*$", re.IGNORECASE),
)


def clean_email_content(content: str, max_length: int = DEFAULT_MAX_CONTENT_LENGTH) -> str:
    """Normalize raw body text for the model.

    Collapses whitespace runs, strips a trailing signature block and
    truncates to max_length characters, appending a marker when cut.

    Args:
        content: Raw email body.
        max_length: Maximum characters kept before the truncation marker.

    Returns:
        Cleaned content.

    Raises:
        ContentValidationError: If content is not a string.
    """
    if not isinstance(content, str):
        raise ContentValidationError(
            f"Email content must be a string, got {type(content).__name__}"
        )

    cleaned = _WHITESPACE.sub(" ", content).strip()
    for pattern in _SIGNATURE_PATTERNS:
        cleaned = pattern.sub("", cleaned).rstrip()

    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length] + TRUNCATION_MARKER
    return cleaned


def _field_or_default(value: Any, name: str, default: str) -> str:
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        raise ContentValidationError(f"Email {name} must be a string, got {type(value).__name__}")
    return value


def format_email_for_analysis(
    email: Email,
    max_length: int = DEFAULT_MAX_CONTENT_LENGTH,
    max_prompt_length: int = DEFAULT_MAX_PROMPT_LENGTH,
) -> str:
    """Build the content block shared by every analysis prompt.

    Missing subject/sender fall back to placeholders; a missing body is
    treated as empty.

    Raises:
        ContentValidationError: On non-string fields or oversize content.
    """
    subject = _field_or_default(email.subject, "subject", "No Subject")
    sender = _field_or_default(email.sender, "sender", "Unknown Sender")
    body = clean_email_content(email.body if email.body is not None else "", max_length)

    content = f"Subject: {subject}\nFrom: {sender}\nContent: {body}"
    return validate_prompt_input(content, max_prompt_length)


def validate_prompt_input(content: Any, max_length: int = DEFAULT_MAX_PROMPT_LENGTH) -> str:
    """Check that prompt content is a non-empty string of reasonable size.

    Raises:
        ContentValidationError: If content is not a string, is blank, or is
            longer than max_length.
    """
    if not isinstance(content, str):
        raise ContentValidationError(
            f"Invalid prompt input: must be a string, got {type(content).__name__}"
        )
    if not content.strip():
        raise ContentValidationError("Invalid prompt input: must be a non-empty string")
    if len(content) > max_length:
        raise ContentValidationError(
            f"Prompt input too long: maximum {max_length:,} characters"
        )
    return content
