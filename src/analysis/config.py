"""Configuration for content analysis.

Uses Pydantic settings for environment-based configuration, following the
same pattern as other service configs in the project. Lexicons are plain
lists so deployments can tune them without a code change.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POSITIVE_TERMS = [
    "secure", "protection", "safe", "successful", "improved", "updated", "fixed",
]

DEFAULT_NEGATIVE_TERMS = [
    "breach", "attack", "vulnerability", "hack", "exploit", "malware", "threat", "risk",
]

DEFAULT_STOPWORDS = [
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
    "by", "is", "are", "was", "were", "be", "been", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should", "may", "might",
    "can", "a", "an", "this", "that", "these", "those",
]

DEFAULT_TRENDING_TERMS = ["breaking", "urgent", "alert", "critical", "major", "massive"]

DEFAULT_BREAKING_TERMS = ["breaking", "urgent", "alert", "just in", "developing"]

DEFAULT_TAG_VOCABULARY = [
    "malware", "ransomware", "phishing", "apt", "zero-day", "vulnerability",
    "breach", "incident", "threat-intelligence", "compliance", "privacy",
    "encryption", "authentication", "firewall", "endpoint", "cloud-security",
]


class AnalysisConfig(BaseSettings):
    """
    Configuration for the content analyzer.

    All settings can be overridden via environment variables with ANALYSIS_ prefix.
    Example: ANALYSIS_SENTIMENT_STEP=0.2
    List settings take JSON: ANALYSIS_TAG_VOCABULARY='["malware","botnet"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="ANALYSIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Read time
    words_per_minute: int = Field(default=200, ge=1)

    # Sentiment
    sentiment_step: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="Score added (or subtracted) per lexicon term present.",
    )
    positive_terms: list[str] = Field(default_factory=lambda: list(DEFAULT_POSITIVE_TERMS))
    negative_terms: list[str] = Field(default_factory=lambda: list(DEFAULT_NEGATIVE_TERMS))

    # Keywords
    max_keywords: int = Field(default=10, ge=1, le=50)
    min_keyword_length: int = Field(
        default=4,
        ge=1,
        description="Tokens shorter than this are never keywords.",
    )
    stopwords: list[str] = Field(default_factory=lambda: list(DEFAULT_STOPWORDS))

    # Flags
    trending_terms: list[str] = Field(default_factory=lambda: list(DEFAULT_TRENDING_TERMS))
    breaking_terms: list[str] = Field(default_factory=lambda: list(DEFAULT_BREAKING_TERMS))

    # Tags
    tag_vocabulary: list[str] = Field(default_factory=lambda: list(DEFAULT_TAG_VOCABULARY))
    tag_confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    max_tags: int = Field(default=5, ge=0)

    # Excerpt
    excerpt_length: int = Field(default=200, ge=10)
