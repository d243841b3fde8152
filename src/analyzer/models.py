"""Data models for the analyzer module.

The five analysis records mirror the JSON objects the model is asked to
return. ``from_dict`` validates every field and raises ``ValueError``,
``TypeError`` or ``KeyError`` on anything missing or mistyped; callers catch
those and substitute ``default()``, so a record is always fully populated.
``to_dict`` emits the same camelCase keys the model uses.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

NO_DEADLINE = "no deadline"
MAX_KEY_POINTS = 5


class AnalysisKind(Enum):
    """The five independent analyses run for every email."""

    IMPORTANCE = "importance"
    SUMMARY = "summary"
    ACTIONS = "actions"
    SENTIMENT = "sentiment"
    CLASSIFICATION = "classification"


class Urgency(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Tone(Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    URGENT = "urgent"
    FRIENDLY = "friendly"
    FORMAL = "formal"
    NEUTRAL = "neutral"


class Priority(Enum):
    """Action item priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Sentiment(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Emotion(Enum):
    HAPPY = "happy"
    ANGRY = "angry"
    FRUSTRATED = "frustrated"
    EXCITED = "excited"
    WORRIED = "worried"
    SATISFIED = "satisfied"
    NEUTRAL = "neutral"


class Category(Enum):
    """Primary email category."""

    WORK = "work"
    PERSONAL = "personal"
    FINANCE = "finance"
    TRAVEL = "travel"
    SHOPPING = "shopping"
    SOCIAL = "social"
    NEWS = "news"
    MARKETING = "marketing"
    SPAM = "spam"


class BusinessRelevance(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MessageRole(Enum):
    """LLM message roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    """A message in an LLM conversation.

    Attributes:
        role: The role of the message sender (system, user, assistant).
        content: The text content of the message.
    """

    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        """Serialize message to dictionary for API calls."""
        return {
            "role": self.role.value,
            "content": self.content,
        }


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def _require_bool(data: dict[str, Any], key: str) -> bool:
    value = data[key]
    if not isinstance(value, bool):
        raise TypeError(f"{key} must be a boolean, got {type(value).__name__}")
    return value


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _require_enum(data: dict[str, Any], key: str, enum_cls: type[Enum]) -> Any:
    return enum_cls(_require_str(data, key).strip().lower())


def _require_str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError(f"{key} must be a list of strings")
    return value


def _require_int_in_range(data: dict[str, Any], key: str, low: int, high: int) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, got {type(value).__name__}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{key} must be a whole number, got {value}")
        value = int(value)
    if not low <= value <= high:
        raise ValueError(f"{key} must be between {low} and {high}, got {value}")
    return value


def _require_unit_float(data: dict[str, Any], key: str) -> float:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, got {type(value).__name__}")
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{key} must be between 0 and 1, got {value}")
    return float(value)


def _require_object(data: Any, name: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"{name} must be a JSON object, got {type(data).__name__}")
    return data


def _unique(values: list[str]) -> list[str]:
    """Drop duplicates while keeping first-seen order."""
    return list(dict.fromkeys(values))


# ---------------------------------------------------------------------------
# Analysis kind records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportanceResult:
    """Importance on a 1-10 scale with the model's reasoning."""

    importance: int
    reasoning: str
    urgency: Urgency

    @classmethod
    def default(cls) -> "ImportanceResult":
        return cls(importance=5, reasoning="Error analyzing importance", urgency=Urgency.MEDIUM)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImportanceResult":
        data = _require_object(data, "importance")
        return cls(
            importance=_require_int_in_range(data, "importance", 1, 10),
            reasoning=_require_str(data, "reasoning"),
            urgency=_require_enum(data, "urgency", Urgency),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "importance": self.importance,
            "reasoning": self.reasoning,
            "urgency": self.urgency.value,
        }


@dataclass(frozen=True)
class SummaryResult:
    """Short summary, up to five key points and the overall tone."""

    summary: str
    key_points: list[str]
    tone: Tone

    @classmethod
    def default(cls) -> "SummaryResult":
        return cls(summary="Unable to generate summary", key_points=[], tone=Tone.NEUTRAL)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SummaryResult":
        data = _require_object(data, "summary")
        return cls(
            summary=_require_str(data, "summary"),
            key_points=_require_str_list(data, "keyPoints")[:MAX_KEY_POINTS],
            tone=_require_enum(data, "tone", Tone),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "keyPoints": list(self.key_points),
            "tone": self.tone.value,
        }


@dataclass(frozen=True)
class ActionItem:
    """A single task the recipient is asked to do.

    Attributes:
        task: Description of what needs to be done.
        deadline: ISO date string, or NO_DEADLINE.
        priority: Task priority.
        assignee: Who should do it ("me", "sender", "other", ...).
        category: Optional grouping used by batch insights.
    """

    task: str
    deadline: str
    priority: Priority
    assignee: str
    category: Optional[str] = None

    @property
    def has_deadline(self) -> bool:
        return self.deadline != NO_DEADLINE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActionItem":
        data = _require_object(data, "actionItems entry")
        deadline = data.get("deadline")
        if deadline is None:
            deadline = NO_DEADLINE
        elif not isinstance(deadline, str):
            raise TypeError("deadline must be a string")
        elif deadline.strip().lower() == NO_DEADLINE:
            deadline = NO_DEADLINE
        else:
            deadline = date.fromisoformat(deadline.strip()).isoformat()

        category = data.get("category")
        if category is not None and not isinstance(category, str):
            raise TypeError("category must be a string")

        return cls(
            task=_require_str(data, "task"),
            deadline=deadline,
            priority=_require_enum(data, "priority", Priority),
            assignee=_require_str(data, "assignee"),
            category=category or None,
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "task": self.task,
            "deadline": self.deadline,
            "priority": self.priority.value,
            "assignee": self.assignee,
        }
        if self.category:
            data["category"] = self.category
        return data


@dataclass(frozen=True)
class ActionItemsResult:
    """Extracted action items plus deadline and response flags."""

    action_items: list[ActionItem]
    has_deadlines: bool
    requires_response: bool

    @classmethod
    def default(cls) -> "ActionItemsResult":
        return cls(action_items=[], has_deadlines=False, requires_response=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActionItemsResult":
        data = _require_object(data, "actions")
        items = data["actionItems"]
        if not isinstance(items, list):
            raise TypeError("actionItems must be a list")
        return cls(
            action_items=[ActionItem.from_dict(item) for item in items],
            has_deadlines=_require_bool(data, "hasDeadlines"),
            requires_response=_require_bool(data, "requiresResponse"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "actionItems": [item.to_dict() for item in self.action_items],
            "hasDeadlines": self.has_deadlines,
            "requiresResponse": self.requires_response,
        }


@dataclass(frozen=True)
class SentimentResult:
    """Sentiment, dominant emotion and complaint/praise flags."""

    sentiment: Sentiment
    emotion: Emotion
    confidence: float
    is_complaint: bool
    is_praise: bool

    @classmethod
    def default(cls) -> "SentimentResult":
        return cls(
            sentiment=Sentiment.NEUTRAL,
            emotion=Emotion.NEUTRAL,
            confidence=0.5,
            is_complaint=False,
            is_praise=False,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SentimentResult":
        data = _require_object(data, "sentiment")
        return cls(
            sentiment=_require_enum(data, "sentiment", Sentiment),
            emotion=_require_enum(data, "emotion", Emotion),
            confidence=_require_unit_float(data, "confidence"),
            is_complaint=_require_bool(data, "isComplaint"),
            is_praise=_require_bool(data, "isPraise"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sentiment": self.sentiment.value,
            "emotion": self.emotion.value,
            "confidence": self.confidence,
            "isComplaint": self.is_complaint,
            "isPraise": self.is_praise,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """Category, bulk-mail flags and business relevance."""

    primary_category: Category
    secondary_categories: list[str]
    is_automated: bool
    is_newsletter: bool
    is_promotion: bool
    business_relevance: BusinessRelevance

    @classmethod
    def default(cls) -> "ClassificationResult":
        return cls(
            primary_category=Category.WORK,
            secondary_categories=[],
            is_automated=False,
            is_newsletter=False,
            is_promotion=False,
            business_relevance=BusinessRelevance.MEDIUM,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClassificationResult":
        data = _require_object(data, "classification")
        return cls(
            primary_category=_require_enum(data, "primaryCategory", Category),
            secondary_categories=_unique(_require_str_list(data, "secondaryCategories")),
            is_automated=_require_bool(data, "isAutomated"),
            is_newsletter=_require_bool(data, "isNewsletter"),
            is_promotion=_require_bool(data, "isPromotion"),
            business_relevance=_require_enum(data, "businessRelevance", BusinessRelevance),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "primaryCategory": self.primary_category.value,
            "secondaryCategories": list(self.secondary_categories),
            "isAutomated": self.is_automated,
            "isNewsletter": self.is_newsletter,
            "isPromotion": self.is_promotion,
            "businessRelevance": self.business_relevance.value,
        }


# ---------------------------------------------------------------------------
# Composite analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompositeAnalysis:
    """All five analyses for one email.

    Attributes:
        email_id: ID of the analyzed email.
        timestamp: The email's own timestamp (may be None if unknown).
        importance: Importance record.
        summary: Summary record.
        action_items: Action items record.
        sentiment: Sentiment record.
        classification: Classification record.
        analyzed_at: When assembly completed.
        fallback_kinds: Kinds that were replaced by their default record.
    """

    email_id: str
    timestamp: Optional[datetime]
    importance: ImportanceResult
    summary: SummaryResult
    action_items: ActionItemsResult
    sentiment: SentimentResult
    classification: ClassificationResult
    analyzed_at: datetime
    fallback_kinds: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the nested shape the dashboard consumes."""
        return {
            "emailId": self.email_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "analysis": {
                "importance": self.importance.to_dict(),
                "summary": self.summary.to_dict(),
                "actionItems": self.action_items.to_dict(),
                "sentiment": self.sentiment.to_dict(),
                "classification": self.classification.to_dict(),
                "analyzedAt": self.analyzed_at.isoformat(),
            },
        }
