from __future__ import annotations

import re
from urllib.parse import quote, urlparse

from bs4 import BeautifulSoup


def is_valid_url(url: str) -> bool:
    """Basic URL validation."""
    try:
        result = urlparse(url)
        return all([result.scheme in ("http", "https"), result.netloc])
    except ValueError:
        return False


def normalize_url_key(url: str) -> str:
    """Dedup key for a URL: scheme and one trailing slash stripped."""
    key = re.sub(r"^https?://", "", url.strip())
    if key.endswith("/"):
        key = key[:-1]
    return key


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def clean_content(text: str, max_length: int = 5000) -> str:
    """Clean extracted content: collapse whitespace, trim to max length."""
    text = collapse_whitespace(text)
    if max_length > 0 and len(text) > max_length:
        text = text[:max_length]
    return text


def strip_markup(fragment: str) -> str:
    """Plain text of an HTML fragment, entities decoded."""
    if "<" not in fragment and "&" not in fragment:
        return collapse_whitespace(fragment)
    return collapse_whitespace(BeautifulSoup(fragment, "html.parser").get_text())


def wikipedia_article_url(title: str, language: str = "en") -> str:
    slug = quote(title.strip().replace(" ", "_"), safe="_()',-.:")
    return f"https://{language}.wikipedia.org/wiki/{slug}"
