"""Content analysis: sentiment, keywords, flags, tags, excerpts and images."""

from src.analysis.config import AnalysisConfig
from src.analysis.schemas import ContentAnalysis, SuggestedTag
from src.analysis.service import ContentAnalyzer
from src.analysis.text import (
    clean_html,
    clean_text,
    entry_content,
    extract_image_url,
    generate_excerpt,
)

__all__ = [
    "AnalysisConfig",
    "ContentAnalysis",
    "ContentAnalyzer",
    "SuggestedTag",
    "clean_html",
    "clean_text",
    "entry_content",
    "extract_image_url",
    "generate_excerpt",
]
