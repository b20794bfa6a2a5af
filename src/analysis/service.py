"""
Content analysis for news articles.

Fixed-lexicon heuristics over the lowercased title, description and body:
reading time, a presence-based sentiment score, frequency keywords,
trending/breaking flags and suggested tags. Every threshold and lexicon
comes from AnalysisConfig.

The analyzer is pure and synchronous; the processor calls it inline.
"""

import logging
import math
import re
from collections import Counter

from src.analysis.config import AnalysisConfig
from src.analysis.schemas import ContentAnalysis, SuggestedTag

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")


class ContentAnalyzer:
    """
    Heuristic content analyzer.

    Usage:
        >>> analyzer = ContentAnalyzer()
        >>> result = analyzer.analyze("Ransomware attack hits hospital", "", "")
        >>> result.sentiment_score
        -0.1
    """

    def __init__(self, config: AnalysisConfig | None = None):
        self.config = config or AnalysisConfig()
        self._stopwords = frozenset(w.lower() for w in self.config.stopwords)

    def analyze(self, title: str, description: str = "", content: str = "") -> ContentAnalysis:
        """Analyze an article's text. Inputs should already be stripped of HTML."""
        text = f"{title} {description} {content}".lower()

        return ContentAnalysis(
            read_time_minutes=self.read_time(text),
            sentiment_score=self.sentiment(text),
            keywords=self.keywords(text),
            suggested_tags=self.suggest_tags(text),
            is_trending=self._contains_any(text, self.config.trending_terms),
            is_breaking=self._contains_any(text, self.config.breaking_terms),
        )

    def read_time(self, text: str) -> int:
        words = len(text.split())
        return max(1, math.ceil(words / self.config.words_per_minute))

    def sentiment(self, text: str) -> float:
        """
        +step per positive term present, -step per negative term present.

        Each term counts once no matter how often it appears, and terms
        match as substrings ("hack" matches "hackers").
        """
        step = self.config.sentiment_step
        score = 0.0
        for term in self.config.positive_terms:
            if term.lower() in text:
                score += step
        for term in self.config.negative_terms:
            if term.lower() in text:
                score -= step
        return round(max(-1.0, min(1.0, score)), 4)

    def keywords(self, text: str) -> list[str]:
        """Top tokens by frequency; ties keep first-seen order."""
        tokens = _NON_WORD.sub(" ", text.lower()).split()
        counts = Counter(
            token
            for token in tokens
            if len(token) >= self.config.min_keyword_length
            and token not in self._stopwords
        )
        # Counter preserves insertion order and most_common sorts stably
        return [word for word, _count in counts.most_common(self.config.max_keywords)]

    def suggest_tags(self, text: str) -> list[SuggestedTag]:
        tags: list[SuggestedTag] = []
        for term in self.config.tag_vocabulary:
            if len(tags) >= self.config.max_tags:
                break
            term = term.lower()
            if term in text or term.replace("-", " ") in text:
                tags.append(SuggestedTag(tag=term, confidence=self.config.tag_confidence))
        return tags

    @staticmethod
    def _contains_any(text: str, terms: list[str]) -> bool:
        return any(term.lower() in text for term in terms)
