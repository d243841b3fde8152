"""Email data model for the fetcher module."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class Email:
    """An email handed to the analysis pipeline.

    Immutable for the duration of analysis. Only id, subject, body, sender
    and timestamp are used for prompting; the remaining Gmail fields are
    carried for display and linking.

    Attributes:
        id: Gmail message ID (unique per message)
        subject: Email subject line
        body: Plain text body (may be empty)
        sender: Raw From header or display name
        timestamp: When the email was sent, if known
        thread_id: Gmail thread ID
        sender_email: Sender email address
        snippet: Gmail's preview snippet
        labels: List of Gmail label IDs
    """

    id: str
    subject: str
    body: str
    sender: str
    timestamp: Optional[datetime] = None
    thread_id: str = ""
    sender_email: str = ""
    snippet: str = ""
    labels: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize email to dictionary for storage or transmission."""
        return {
            "id": self.id,
            "subject": self.subject,
            "body": self.body,
            "sender": self.sender,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "thread_id": self.thread_id,
            "sender_email": self.sender_email,
            "snippet": self.snippet,
            "labels": list(self.labels),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Email":
        """Deserialize email from dictionary."""
        timestamp = data.get("timestamp")
        return cls(
            id=data["id"],
            subject=data.get("subject", ""),
            body=data.get("body", ""),
            sender=data.get("sender", ""),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
            thread_id=data.get("thread_id", ""),
            sender_email=data.get("sender_email", ""),
            snippet=data.get("snippet", ""),
            labels=tuple(data.get("labels", [])),
        )
