"""Result types for content analysis."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SuggestedTag:
    """A vocabulary term found in an article, with a fixed confidence."""

    tag: str
    confidence: float


@dataclass
class ContentAnalysis:
    """
    Signals extracted from an article's combined text.

    Attributes:
        read_time_minutes: Estimated reading time, never below 1.
        sentiment_score: Lexicon score clamped to [-1, 1].
        keywords: Most frequent non-stopword tokens, most frequent first.
        suggested_tags: Vocabulary terms present in the text.
        is_trending: Any trending term present.
        is_breaking: Any breaking term present.
    """

    read_time_minutes: int = 1
    sentiment_score: float = 0.0
    keywords: list[str] = field(default_factory=list)
    suggested_tags: list[SuggestedTag] = field(default_factory=list)
    is_trending: bool = False
    is_breaking: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "read_time_minutes": self.read_time_minutes,
            "sentiment_score": self.sentiment_score,
            "keywords": list(self.keywords),
            "suggested_tags": [
                {"tag": t.tag, "confidence": t.confidence} for t in self.suggested_tags
            ],
            "is_trending": self.is_trending,
            "is_breaking": self.is_breaking,
        }
