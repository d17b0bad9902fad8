from __future__ import annotations

import asyncio
from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup, Tag
from loguru import logger

from draftdesk.config import settings
from draftdesk.tools import web_utils

NON_CONTENT_TAGS = (
    "script",
    "style",
    "nav",
    "header",
    "footer",
    "aside",
    "iframe",
    "noscript",
)

# Tried in order; the first selector with any match wins.
CONTENT_SELECTORS = (
    "article",
    '[role="main"]',
    "main",
    ".post-content",
    ".article-body",
    ".entry-content",
)

# Matched against whole class tokens and the id, never substrings.
AD_TOKENS = frozenset(
    {"ad", "ads", "advert", "advertisement", "sponsored", "promo", "banner-ad", "ad-banner"}
)
CONTENT_SELECTOR_GROUP = ", ".join(CONTENT_SELECTORS)


@dataclass
class ExtractedContent:
    url: str
    title: str
    text: str
    method: str
    raw_length: int
    extracted_length: int


def _looks_like_ad(tag: Tag) -> bool:
    if tag.name in ("html", "body", "main", "article"):
        return False
    tokens = {token.lower() for token in tag.get("class") or []}
    ident = (tag.get("id") or "").lower()
    if not (tokens & AD_TOKENS or ident in AD_TOKENS):
        return False
    return tag.select_one(CONTENT_SELECTOR_GROUP) is None


def _strip_non_content(soup: BeautifulSoup) -> None:
    for element in soup.find_all(list(NON_CONTENT_TAGS)):
        if not element.decomposed:
            element.decompose()
    for element in soup.find_all(_looks_like_ad):
        if not element.decomposed:
            element.decompose()


def extract_main_content(
    url: str,
    raw_html: str,
    *,
    max_chars: int | None = None,
) -> ExtractedContent:
    """Extract best-effort main text from an HTML page."""
    target_chars = max_chars if max_chars is not None else settings.fetch_max_chars

    soup = BeautifulSoup(raw_html, "html.parser")
    title = web_utils.collapse_whitespace(soup.title.get_text()) if soup.title else ""
    _strip_non_content(soup)

    text = ""
    method = "document"
    for selector in CONTENT_SELECTORS:
        matches = soup.select(selector)
        if matches:
            text = " ".join(match.get_text(" ") for match in matches)
            method = f"selector:{selector}"
            break

    if not text:
        body = soup.body
        if body is not None:
            text = body.get_text(" ")
            method = "body"
        else:
            text = soup.get_text(" ")

    cleaned = web_utils.clean_content(text, max_length=target_chars)
    return ExtractedContent(
        url=url,
        title=title,
        text=cleaned,
        method=method,
        raw_length=len(raw_html),
        extracted_length=len(cleaned),
    )


async def _download(url: str, user_agent: str) -> str:
    async with httpx.AsyncClient(follow_redirects=True) as client:
        response = await client.get(
            url,
            headers={"User-Agent": user_agent, "Accept": "text/html"},
        )
    if not response.is_success:
        logger.debug(f"Fetch of {url} returned status {response.status_code}")
        return ""
    content_type = response.headers.get("content-type", "").lower()
    if content_type and "html" not in content_type and "text" not in content_type:
        logger.debug(f"Skipping non-text content at {url}: {content_type}")
        return ""
    return response.text


async def fetch_page_content(
    url: str,
    max_length: int | None = None,
    *,
    timeout: float | None = None,
) -> str:
    """Fetch a page and return its main text, or "" when nothing usable came back.

    The whole download runs under a hard wall-clock deadline; when it expires
    the in-flight request is cancelled. Network errors, non-success statuses
    and timeouts all produce the empty-string sentinel instead of raising.
    """
    limit = max_length if max_length is not None else settings.fetch_max_chars
    deadline = timeout if timeout is not None else settings.fetch_timeout_seconds

    try:
        raw_html = await asyncio.wait_for(
            _download(url, settings.search_user_agent),
            timeout=deadline,
        )
        if not raw_html:
            return ""
        return extract_main_content(url, raw_html, max_chars=limit).text
    except asyncio.TimeoutError:
        logger.debug(f"Fetch of {url} timed out after {deadline}s")
        return ""
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        logger.debug(f"Fetch of {url} failed: {type(e).__name__}: {e}")
        return ""
