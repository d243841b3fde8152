"""EmailFetcher: reads Gmail messages into Email records."""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterator, Optional

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from .gmail_auth import GmailAuthenticator
from .mime import extract_plain_text, split_sender
from .models import Email

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "newer_than:1d in:inbox"


class EmailFetcher:
    """Fetches Gmail messages and normalizes them for analysis.

    An empty body falls back to Gmail's snippet so the analyzer always has
    something to read.

    Example usage:
        fetcher = EmailFetcher()
        for email in fetcher.fetch_recent(max_results=20):
            print(email.subject)
    """

    def __init__(
        self,
        authenticator: Optional[GmailAuthenticator] = None,
        service: Optional[Resource] = None,
    ):
        """Initialize the EmailFetcher.

        Args:
            authenticator: Gmail authenticator instance.
                Defaults to GmailAuthenticator with default paths.
            service: Pre-built Gmail API service (for testing).
                If provided, authenticator is ignored.
        """
        self._auth = authenticator
        self._service = service

    def _get_service(self) -> Resource:
        """Get Gmail API service, creating if needed."""
        if self._service is None:
            if self._auth is None:
                self._auth = GmailAuthenticator()
            self._service = self._auth.get_service()
        return self._service

    @staticmethod
    def _parse_timestamp(message: dict, date_header: str) -> Optional[datetime]:
        try:
            return parsedate_to_datetime(date_header)
        except (ValueError, TypeError):
            internal = message.get("internalDate")
            if internal is None:
                return None
            return datetime.fromtimestamp(int(internal) / 1000, tz=timezone.utc)

    def _parse_message(self, message: dict) -> Email:
        """Parse a Gmail API message (format='full') into an Email."""
        payload = message.get("payload", {})
        headers = {h["name"].lower(): h["value"] for h in payload.get("headers", [])}

        sender_raw = headers.get("from", "")
        _, sender_email = split_sender(sender_raw)
        snippet = message.get("snippet", "")
        body = extract_plain_text(payload) or snippet

        return Email(
            id=message["id"],
            subject=headers.get("subject", ""),
            body=body,
            sender=sender_raw,
            timestamp=self._parse_timestamp(message, headers.get("date", "")),
            thread_id=message.get("threadId", ""),
            sender_email=sender_email,
            snippet=snippet,
            labels=tuple(message.get("labelIds", [])),
        )

    def fetch_by_id(self, message_id: str) -> Email:
        """Fetch a specific email by message ID.

        Raises:
            googleapiclient.errors.HttpError: If message not found
        """
        message = (
            self._get_service()
            .users()
            .messages()
            .get(userId="me", id=message_id, format="full")
            .execute()
        )
        return self._parse_message(message)

    def fetch_recent(self, query: str = DEFAULT_QUERY, max_results: int = 50) -> Iterator[Email]:
        """Fetch messages matching a Gmail search query.

        Args:
            query: Gmail search syntax, e.g. "is:unread in:inbox".
            max_results: Maximum number of messages to list.

        Yields:
            Email objects in the order Gmail lists them. A message that
            cannot be read (deleted since listing, say) is logged and skipped.
        """
        results = (
            self._get_service()
            .users()
            .messages()
            .list(userId="me", q=query, maxResults=max_results)
            .execute()
        )
        refs = results.get("messages", [])
        logger.info("Gmail query %r matched %d messages", query, len(refs))

        for ref in refs:
            try:
                email = self.fetch_by_id(ref["id"])
            except HttpError as e:
                logger.warning(
                    "Skipping message %s: %s", ref["id"], e, extra={"email_id": ref["id"]}
                )
                continue
            yield email
