"""Tests for ContentAnalyzer heuristics."""

import pytest

from src.analysis.config import AnalysisConfig
from src.analysis.schemas import SuggestedTag
from src.analysis.service import ContentAnalyzer


@pytest.fixture
def analyzer() -> ContentAnalyzer:
    return ContentAnalyzer(AnalysisConfig())


class TestReadTime:
    """Tests for read time estimation."""

    @pytest.mark.parametrize("text", ["", "   ", "one", "word " * 199])
    def test_never_below_one_minute(self, analyzer: ContentAnalyzer, text: str) -> None:
        assert analyzer.read_time(text) == 1

    def test_rounds_up_partial_minutes(self, analyzer: ContentAnalyzer) -> None:
        assert analyzer.read_time("word " * 200) == 1
        assert analyzer.read_time("word " * 201) == 2
        assert analyzer.read_time("word " * 1000) == 5

    def test_words_per_minute_is_configurable(self) -> None:
        analyzer = ContentAnalyzer(AnalysisConfig(words_per_minute=100))
        assert analyzer.read_time("word " * 250) == 3


class TestSentiment:
    """Tests for lexicon sentiment scoring."""

    def test_neutral_text_scores_zero(self, analyzer: ContentAnalyzer) -> None:
        assert analyzer.sentiment("quarterly conference schedule announced") == 0.0

    def test_each_term_counts_once(self, analyzer: ContentAnalyzer) -> None:
        assert analyzer.sentiment("attack attack attack attack") == -0.1

    def test_substring_matches(self, analyzer: ContentAnalyzer) -> None:
        # "hack" inside "hackers", "secure" inside "insecure"
        assert analyzer.sentiment("hackers target insecure routers") == 0.0

    def test_positive_and_negative_offset(self, analyzer: ContentAnalyzer) -> None:
        assert analyzer.sentiment("patch fixed the vulnerability") == 0.0

    def test_all_negative_terms(self, analyzer: ContentAnalyzer) -> None:
        text = "breach attack vulnerability hack exploit malware threat risk"
        assert analyzer.sentiment(text) == -0.8

    def test_all_positive_terms(self, analyzer: ContentAnalyzer) -> None:
        text = "secure protection safe successful improved updated fixed"
        assert analyzer.sentiment(text) == 0.7

    def test_clamped_to_bounds(self) -> None:
        analyzer = ContentAnalyzer(AnalysisConfig(sentiment_step=0.5))
        text = "breach attack vulnerability hack exploit"
        assert analyzer.sentiment(text) == -1.0
        assert analyzer.sentiment("secure safe fixed") == 1.0

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "breach " * 50,
            "secure protection safe successful improved updated fixed " * 20,
            "breach attack vulnerability hack exploit malware threat risk secure safe",
            "ümlaut ñ 漢字 emoji 🔒",
        ],
    )
    def test_always_within_range(self, text: str) -> None:
        for step in (0.1, 0.3, 1.0):
            score = ContentAnalyzer(AnalysisConfig(sentiment_step=step)).sentiment(text)
            assert -1.0 <= score <= 1.0


class TestKeywords:
    """Tests for frequency keyword extraction."""

    def test_drops_short_tokens_and_stopwords(self, analyzer: ContentAnalyzer) -> None:
        keywords = analyzer.keywords("the cat and the dog were with those attackers")
        assert keywords == ["attackers"]

    def test_orders_by_frequency_then_first_seen(self, analyzer: ContentAnalyzer) -> None:
        text = "patch router patch firmware router patch"
        assert analyzer.keywords(text) == ["patch", "router", "firmware"]

    def test_punctuation_splits_tokens(self, analyzer: ContentAnalyzer) -> None:
        assert analyzer.keywords("zero-day: chrome/edge!") == ["zero", "chrome", "edge"]

    def test_capped_at_ten(self, analyzer: ContentAnalyzer) -> None:
        text = " ".join(f"token{i:02d}" for i in range(25))
        keywords = analyzer.keywords(text)
        assert len(keywords) == 10
        assert keywords[0] == "token00"


class TestFlags:
    """Tests for trending and breaking detection."""

    def test_independent_flags(self, analyzer: ContentAnalyzer) -> None:
        trending_only = analyzer.analyze("Massive botnet takedown")
        assert trending_only.is_trending is True
        assert trending_only.is_breaking is False

        breaking_only = analyzer.analyze("Developing: outage at registrar")
        assert breaking_only.is_trending is False
        assert breaking_only.is_breaking is True

        both = analyzer.analyze("Breaking news from the vendor")
        assert both.is_trending is True
        assert both.is_breaking is True

    def test_multi_word_breaking_term(self, analyzer: ContentAnalyzer) -> None:
        assert analyzer.analyze("Just in: registrar outage").is_breaking is True

    def test_neither(self, analyzer: ContentAnalyzer) -> None:
        result = analyzer.analyze("Weekly roundup of patches")
        assert result.is_trending is False
        assert result.is_breaking is False


class TestSuggestedTags:
    """Tests for vocabulary tag suggestions."""

    def test_hyphenated_terms_match_spaced_form(self, analyzer: ContentAnalyzer) -> None:
        tags = analyzer.suggest_tags("new cloud security guidance")
        assert tags == [SuggestedTag(tag="cloud-security", confidence=0.8)]

    def test_capped_at_five_in_vocabulary_order(self, analyzer: ContentAnalyzer) -> None:
        text = "malware ransomware phishing apt zero-day vulnerability breach"
        tags = analyzer.suggest_tags(text)
        assert [t.tag for t in tags] == [
            "malware", "ransomware", "phishing", "apt", "zero-day",
        ]
        assert all(t.confidence == 0.8 for t in tags)

    def test_no_match(self, analyzer: ContentAnalyzer) -> None:
        assert analyzer.suggest_tags("conference keynote announced") == []


class TestAnalyze:
    """End-to-end analysis scenarios."""

    def test_ransomware_headline(self, analyzer: ContentAnalyzer) -> None:
        result = analyzer.analyze("Critical ransomware breach exploits zero-day vulnerability")

        assert result.is_trending is True  # "critical"
        # None of breaking/urgent/alert/just in/developing appear
        assert result.is_breaking is False
        assert result.sentiment_score <= -0.3
        tags = [t.tag for t in result.suggested_tags]
        assert {"ransomware", "breach", "zero-day", "vulnerability"} <= set(tags)
        assert len(tags) <= 5

    def test_breaking_ransomware_headline(self, analyzer: ContentAnalyzer) -> None:
        result = analyzer.analyze(
            "Breaking: critical ransomware breach exploits zero-day vulnerability"
        )
        assert result.is_trending is True
        assert result.is_breaking is True

    def test_combines_title_description_and_content(self, analyzer: ContentAnalyzer) -> None:
        result = analyzer.analyze("Advisory", "phishing campaign", "urgent reset required")
        assert result.is_breaking is True
        assert [t.tag for t in result.suggested_tags] == ["phishing"]

    def test_to_dict(self, analyzer: ContentAnalyzer) -> None:
        data = analyzer.analyze("Phishing alert").to_dict()
        assert data["suggested_tags"] == [{"tag": "phishing", "confidence": 0.8}]
        assert data["is_breaking"] is True
        assert data["read_time_minutes"] == 1
