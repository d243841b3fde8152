"""Email fetcher module for retrieving emails from Gmail.

Gmail is an external collaborator of the triage pipeline: this module only
turns Gmail API messages into the Email records the analyzer consumes.

Public API:
    - EmailFetcher: Fetches messages by query or ID
    - Email: Immutable email record handed to the analyzer
    - GmailAuthenticator: OAuth token load/refresh helper
    - AuthenticationError: Base exception for auth failures
    - ScopeMismatchError: Token scopes don't match required scopes
    - NonInteractiveAuthError: Auth requires interaction but in non-interactive mode
"""

from .email_fetcher import EmailFetcher
from .exceptions import (
    AuthenticationError,
    NonInteractiveAuthError,
    ScopeMismatchError,
)
from .gmail_auth import GmailAuthenticator
from .models import Email

__all__ = [
    "EmailFetcher",
    "Email",
    "GmailAuthenticator",
    "AuthenticationError",
    "ScopeMismatchError",
    "NonInteractiveAuthError",
]
