from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from draftdesk.config import settings
from draftdesk.tools import web_utils
from draftdesk.tools.base_search import SearchProvider, SearchResult

DDG_HTML_URL = "https://html.duckduckgo.com/html/"
DDG_LITE_URL = "https://lite.duckduckgo.com/lite/"
DDG_BASE_URL = "https://duckduckgo.com"


def resolve_result_url(href: str, displayed_url: str = "") -> str:
    """Unwrap DuckDuckGo's `/l/?uddg=` redirect links to the destination URL.

    Falls back to the displayed URL when the redirect cannot be decoded.
    """
    href = href.strip()
    if "uddg=" in href:
        try:
            parsed = urlparse(urljoin(DDG_BASE_URL, href))
            target = parse_qs(parsed.query).get("uddg", [""])[0]
        except ValueError:
            target = ""
        if target:
            return target
        displayed = displayed_url.strip()
        if displayed:
            return displayed if displayed.startswith("http") else f"https://{displayed}"
        return href
    if href.startswith("//"):
        return f"https:{href}"
    return href


def _is_ad_link(href: str) -> bool:
    return "duckduckgo.com/y.js" in href or "ad_provider=" in href


def parse_html_results(html: str, max_results: int = 10) -> list[SearchResult]:
    """Parse result blocks from the DuckDuckGo HTML endpoint.

    Each `.result` block holds a `.result__a` title link, a `.result__snippet`
    and a `.result__url` with the displayed address.
    """
    soup = BeautifulSoup(html, "html.parser")
    results: list[SearchResult] = []

    for block in soup.select(".result"):
        if len(results) >= max_results:
            break
        if "result--ad" in (block.get("class") or []):
            continue

        title_el = block.select_one(".result__title .result__a") or block.select_one("a.result__a")
        if title_el is None:
            continue
        snippet_el = block.select_one(".result__snippet")
        url_el = block.select_one(".result__url")

        href = str(title_el.get("href", ""))
        if _is_ad_link(href):
            continue

        title = web_utils.collapse_whitespace(title_el.get_text())
        snippet = web_utils.collapse_whitespace(snippet_el.get_text()) if snippet_el else ""
        displayed = web_utils.collapse_whitespace(url_el.get_text()) if url_el else ""
        url = resolve_result_url(href, displayed)

        if title and snippet and web_utils.is_valid_url(url):
            results.append(SearchResult(title=title, url=url, snippet=snippet))

    return results


def parse_lite_results(html: str, max_results: int = 10) -> list[SearchResult]:
    """Parse the row-based markup of the DuckDuckGo lite endpoint.

    A row with `a.result-link` opens a result; the following rows carry its
    `td.result-snippet` and `.link-text` (displayed URL).
    """
    soup = BeautifulSoup(html, "html.parser")
    entries: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None

    for row in soup.find_all("tr"):
        link = row.select_one("a.result-link")
        if link is not None:
            if "result-sponsored" in (row.get("class") or []):
                current = None
                continue
            current = {
                "title": web_utils.collapse_whitespace(link.get_text()),
                "href": str(link.get("href", "")),
                "snippet": "",
                "displayed": "",
            }
            entries.append(current)
            continue

        if current is None:
            continue

        snippet_cell = row.select_one("td.result-snippet")
        if snippet_cell is not None:
            current["snippet"] = web_utils.collapse_whitespace(snippet_cell.get_text())
            continue

        link_text = row.select_one(".link-text")
        if link_text is not None:
            current["displayed"] = web_utils.collapse_whitespace(link_text.get_text())

    results: list[SearchResult] = []
    for entry in entries:
        if len(results) >= max_results:
            break
        if _is_ad_link(entry["href"]):
            continue
        url = resolve_result_url(entry["href"], entry["displayed"])
        if entry["title"] and entry["snippet"] and web_utils.is_valid_url(url):
            results.append(SearchResult(title=entry["title"], url=url, snippet=entry["snippet"]))
    return results


class _DuckDuckGoProvider(SearchProvider):
    endpoint: str = DDG_HTML_URL

    def __init__(
        self,
        *,
        region: str | None = None,
        user_agent: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.region = region or settings.search_region
        self.user_agent = user_agent or settings.search_user_agent

    async def _post(self, query: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            response = await client.post(
                self.endpoint,
                data={"q": query, "kl": self.region},
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "text/html",
                    "Accept-Language": "en-US,en;q=0.9",
                    "Referer": DDG_BASE_URL + "/",
                },
            )
        body = response.text
        self.check_response(response.status_code, body)
        return body

    def parse(self, html: str, max_results: int) -> list[SearchResult]:
        raise NotImplementedError

    async def search(self, query: str, *, max_results: int = 10) -> list[SearchResult]:
        html = await self._post(query)
        return self.parse(html, max_results)


class DuckDuckGoHTMLProvider(_DuckDuckGoProvider):
    """Primary provider: the DuckDuckGo HTML endpoint."""

    name = "duckduckgo_html"
    endpoint = DDG_HTML_URL

    def parse(self, html: str, max_results: int) -> list[SearchResult]:
        return parse_html_results(html, max_results)


class DuckDuckGoLiteProvider(_DuckDuckGoProvider):
    """Secondary provider: the lighter, table-based DuckDuckGo endpoint."""

    name = "duckduckgo_lite"
    endpoint = DDG_LITE_URL

    def parse(self, html: str, max_results: int) -> list[SearchResult]:
        return parse_lite_results(html, max_results)
