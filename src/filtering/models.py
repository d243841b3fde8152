"""Data models for the smart filter."""

from dataclasses import dataclass, field
from typing import Any, Optional

DEFAULT_FOLDER = "Inbox"


@dataclass(frozen=True)
class FilterCriteria:
    """Caller-defined matching dimensions.

    Only the fields that are set are sent to the model. ``extra`` carries
    any additional dimension the caller wants evaluated.
    """

    min_importance: Optional[int] = None
    senders: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    sentiment: Optional[str] = None
    description: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.min_importance is not None:
            data["minImportance"] = self.min_importance
        if self.senders:
            data["senders"] = list(self.senders)
        if self.categories:
            data["categories"] = list(self.categories)
        if self.keywords:
            data["keywords"] = list(self.keywords)
        if self.sentiment:
            data["sentiment"] = self.sentiment
        if self.description:
            data["description"] = self.description
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FilterCriteria":
        """Build criteria from request parameters; unknown keys go to extra."""
        known = {
            "minImportance",
            "senders",
            "categories",
            "keywords",
            "sentiment",
            "description",
        }
        min_importance = data.get("minImportance")
        return cls(
            min_importance=int(min_importance) if min_importance is not None else None,
            senders=tuple(data.get("senders", ())),
            categories=tuple(data.get("categories", ())),
            keywords=tuple(data.get("keywords", ())),
            sentiment=data.get("sentiment"),
            description=data.get("description"),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class FilterResult:
    """The model's decision on whether an email matches the criteria."""

    matches: bool
    matched_criteria: list[str]
    confidence: float
    filter_reason: str
    suggested_folder: str
    auto_actions: list[str]

    @classmethod
    def default(cls) -> "FilterResult":
        return cls(
            matches=False,
            matched_criteria=[],
            confidence=0.0,
            filter_reason="Error during filtering",
            suggested_folder=DEFAULT_FOLDER,
            auto_actions=[],
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FilterResult":
        """Validate the model's JSON; raises ValueError/TypeError/KeyError."""
        matches = data["matches"]
        if not isinstance(matches, bool):
            raise TypeError("matches must be a boolean")

        confidence = data["confidence"]
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise TypeError("confidence must be a number")
        if not 0.0 <= confidence <= 1.0:
            raise ValueError(f"confidence must be between 0 and 1, got {confidence}")

        matched = data["matchedCriteria"]
        actions = data["autoActions"]
        for name, values in (("matchedCriteria", matched), ("autoActions", actions)):
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise TypeError(f"{name} must be a list of strings")

        reason = data["filterReason"]
        folder = data["suggestedFolder"]
        if not isinstance(reason, str) or not isinstance(folder, str):
            raise TypeError("filterReason and suggestedFolder must be strings")

        return cls(
            matches=matches,
            matched_criteria=list(dict.fromkeys(matched)),
            confidence=float(confidence),
            filter_reason=reason,
            suggested_folder=folder or DEFAULT_FOLDER,
            auto_actions=actions,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "matches": self.matches,
            "matchedCriteria": list(self.matched_criteria),
            "confidence": self.confidence,
            "filterReason": self.filter_reason,
            "suggestedFolder": self.suggested_folder,
            "autoActions": list(self.auto_actions),
        }
