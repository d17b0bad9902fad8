from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from draftdesk.config import settings
from draftdesk.exceptions import ProviderError
from draftdesk.tools import web_utils
from draftdesk.tools.base_search import SearchProvider, SearchResult


class WikipediaProvider(SearchProvider):
    """Last-resort provider backed by the MediaWiki API.

    Two phases: `list=search` for candidate titles, then one batched
    `prop=extracts` call for a short plain-text intro per title. Titles without
    an extract keep their search snippet, markup stripped.
    """

    name = "wikipedia"
    # JSON API responses: no HTML block pages, and short bodies are legitimate.
    block_markers: tuple[str, ...] = ()

    def __init__(
        self,
        *,
        language: str | None = None,
        user_agent: str | None = None,
        extract_sentences: int | None = None,
        **kwargs: Any,
    ):
        kwargs.setdefault("min_body_chars", 0)
        super().__init__(**kwargs)
        self.language = language or settings.wikipedia_language
        self.user_agent = user_agent or settings.wikipedia_user_agent
        self.extract_sentences = extract_sentences or settings.wikipedia_extract_sentences

    @property
    def api_url(self) -> str:
        return f"https://{self.language}.wikipedia.org/w/api.php"

    async def _get_json(self, client: httpx.AsyncClient, params: dict[str, Any]) -> dict[str, Any]:
        response = await client.get(
            self.api_url,
            params={**params, "format": "json", "formatversion": "2"},
        )
        self.check_response(response.status_code, response.text)
        payload = response.json()
        if not isinstance(payload, dict):
            raise ProviderError(self.name, "unexpected response shape")
        if "error" in payload:
            error = payload["error"]
            info = error.get("info", "api error") if isinstance(error, dict) else str(error)
            raise ProviderError(self.name, info)
        return payload

    async def _search_titles(
        self, client: httpx.AsyncClient, query: str, max_results: int
    ) -> list[dict[str, Any]]:
        payload = await self._get_json(
            client,
            {
                "action": "query",
                "list": "search",
                "srsearch": query,
                "srlimit": max_results,
                "srprop": "snippet",
                "utf8": 1,
            },
        )
        hits = payload.get("query", {}).get("search", []) or []
        return [hit for hit in hits if isinstance(hit, dict) and hit.get("title")]

    async def _fetch_extracts(self, client: httpx.AsyncClient, titles: list[str]) -> dict[str, str]:
        payload = await self._get_json(
            client,
            {
                "action": "query",
                "prop": "extracts",
                "exintro": 1,
                "explaintext": 1,
                "exsentences": self.extract_sentences,
                "exlimit": "max",
                "titles": "|".join(titles),
            },
        )
        extracts: dict[str, str] = {}
        for page in payload.get("query", {}).get("pages", []) or []:
            if not isinstance(page, dict) or page.get("missing"):
                continue
            extract = web_utils.collapse_whitespace(page.get("extract") or "")
            if extract:
                extracts[page.get("title", "")] = extract
        return extracts

    async def search(self, query: str, *, max_results: int = 10) -> list[SearchResult]:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
        ) as client:
            hits = await self._search_titles(client, query, max_results)
            if not hits:
                return []

            titles = [hit["title"] for hit in hits]
            try:
                extracts = await self._fetch_extracts(client, titles)
            except (ProviderError, httpx.HTTPError, ValueError) as e:
                logger.warning(f"Wikipedia extract lookup failed, using search snippets: {e}")
                extracts = {}

        results: list[SearchResult] = []
        for hit in hits[:max_results]:
            title = hit["title"]
            snippet = extracts.get(title) or web_utils.strip_markup(hit.get("snippet", "") or "")
            if not snippet:
                continue
            results.append(
                SearchResult(
                    title=title,
                    url=web_utils.wikipedia_article_url(title, self.language),
                    snippet=snippet,
                )
            )
        return results
