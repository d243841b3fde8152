"""Exceptions for Gmail fetcher module."""


class AuthenticationError(Exception):
    """Raised when Gmail authentication fails."""

    pass


class ScopeMismatchError(AuthenticationError):
    """Raised when the stored token lacks a scope the fetcher needs."""

    def __init__(self, required_scopes: list[str], token_scopes: list[str]):
        self.required_scopes = required_scopes
        self.token_scopes = token_scopes
        missing = sorted(set(required_scopes) - set(token_scopes))
        super().__init__(
            f"Stored Gmail token is missing scopes {missing}. "
            "Delete the token file and re-authenticate."
        )


class NonInteractiveAuthError(AuthenticationError):
    """Raised when OAuth consent is needed but prompting is disabled."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            f"Gmail authentication needs a browser consent flow ({reason}) "
            "but GMAIL_NON_INTERACTIVE is set."
        )
