"""
Text helpers for feed entries.

HTML is parsed with BeautifulSoup, which also decodes character entities.
Feed entries are the dict-like objects feedparser returns; plain dicts
work as well.
"""

import re
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Sentence cut is used only when it keeps at least this share of the limit
_SENTENCE_CUT_RATIO = 0.7


def clean_text(text: str) -> str:
    """Collapse whitespace and drop control characters."""
    if not text:
        return ""
    text = " ".join(text.split())
    return _CONTROL_CHARS.sub("", text).strip()


def clean_html(value: str) -> str:
    """
    Strip markup and decode entities, returning single-spaced text.

    Script and style bodies are dropped entirely.
    """
    if not value:
        return ""
    if "<" not in value and "&" not in value:
        return clean_text(value)

    soup = BeautifulSoup(value, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    return clean_text(soup.get_text(" "))


def generate_excerpt(text: str, max_length: int = 200) -> str:
    """
    Build a short plain-text excerpt.

    Text at or under ``max_length`` is returned whole. Longer text is cut
    to ``max_length`` and then shortened to the last full stop if that
    keeps more than 70% of the limit. Otherwise it is shortened to the
    last space and ``...`` is appended.

    Args:
        text: Plain text or HTML
        max_length: Length of the initial cut

    Returns:
        Excerpt, at most ``max_length + 3`` characters
    """
    if not text:
        return ""

    cleaned = clean_html(text)
    if len(cleaned) <= max_length:
        return cleaned

    truncated = cleaned[:max_length]

    last_period = truncated.rfind(".")
    if last_period > max_length * _SENTENCE_CUT_RATIO:
        return truncated[: last_period + 1]

    last_space = truncated.rfind(" ")
    if last_space > 0:
        return truncated[:last_space] + "..."
    return truncated + "..."


def entry_content(entry: Mapping[str, Any]) -> str:
    """Raw markup of the first content block (content:encoded), or an empty string."""
    content = entry.get("content") or []
    if content:
        first = content[0]
        value = first.get("value") if isinstance(first, Mapping) else first
        if value:
            return str(value)
    return ""


def _image_enclosure(entry: Mapping[str, Any]) -> str | None:
    candidates = list(entry.get("enclosures") or [])
    candidates.extend(
        link for link in entry.get("links") or [] if link.get("rel") == "enclosure"
    )
    for enclosure in candidates:
        mime = enclosure.get("type") or ""
        url = enclosure.get("href") or enclosure.get("url")
        if mime.startswith("image/") and url:
            return url
    return None


def _explicit_image(entry: Mapping[str, Any]) -> str | None:
    image = entry.get("image")
    if isinstance(image, Mapping):
        return image.get("href") or image.get("url") or None
    if isinstance(image, str) and image:
        return image
    return None


def _thumbnail(entry: Mapping[str, Any]) -> str | None:
    thumbnails = entry.get("media_thumbnail") or []
    for thumb in thumbnails:
        url = thumb.get("url")
        if url:
            return url
    thumbnail = entry.get("thumbnail")
    if isinstance(thumbnail, str) and thumbnail:
        return thumbnail
    return None


def _embedded_image(entry: Mapping[str, Any]) -> str | None:
    markup = entry_content(entry) or entry.get("summary") or entry.get("description") or ""
    if "<img" not in markup.lower():
        return None
    img = BeautifulSoup(markup, "html.parser").find("img", src=True)
    return img["src"] if img else None


def extract_image_url(entry: Mapping[str, Any]) -> str | None:
    """
    Pick a representative image for a feed entry.

    Checked in order, first match wins: an image-typed enclosure, an
    explicit image field, a thumbnail (``media:thumbnail``), then the
    first ``<img src>`` in the raw content or summary markup.
    """
    for finder in (_image_enclosure, _explicit_image, _thumbnail, _embedded_image):
        url = finder(entry)
        if url:
            return url
    return None
