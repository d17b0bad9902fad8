from __future__ import annotations

import asyncio
from datetime import date
from typing import Awaitable, Callable, Sequence

from loguru import logger

from draftdesk.agents.base import BaseAgent
from draftdesk.config import settings
from draftdesk.exceptions import StageInputError
from draftdesk.models.pipeline import ResearchFact, ResearchResult, ResearchSource, utc_now
from draftdesk.models.schemas import ResearchRequest
from draftdesk.services import fact_extractor
from draftdesk.services import logger as log_service
from draftdesk.tools import content_fetcher, web_utils
from draftdesk.tools.base_search import SearchResult
from draftdesk.tools.search_provider import SearchProviderChain, build_default_chain

PageFetcher = Callable[[str], Awaitable[str]]


def deduplicate_results(results: Sequence[SearchResult]) -> list[SearchResult]:
    """Keep the first result per normalized URL, dropping non-http(s) URLs."""
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        if not web_utils.is_valid_url(result.url):
            continue
        key = web_utils.normalize_url_key(result.url)
        if key in seen:
            continue
        seen.add(key)
        unique.append(result)
    return unique


class ResearchAgent(BaseAgent):
    """Searches the web for a topic and returns ranked, source-attributed facts."""

    name = "research"
    description = "Searches the web for a given topic and returns 5-7 key facts with sources"
    capabilities = ("web-search", "fact-extraction", "source-attribution")
    input_model = ResearchRequest

    def __init__(
        self,
        chain: SearchProviderChain | None = None,
        fetch_page: PageFetcher | None = None,
        *,
        target_facts: int | None = None,
        max_pages_to_fetch: int | None = None,
        max_results_per_query: int | None = None,
        max_supplementary_sources: int | None = None,
    ):
        super().__init__()
        self.chain = chain or build_default_chain()
        self.fetch_page = fetch_page or content_fetcher.fetch_page_content
        self.target_facts = (
            target_facts if target_facts is not None else settings.research_target_facts
        )
        self.max_pages_to_fetch = (
            max_pages_to_fetch
            if max_pages_to_fetch is not None
            else settings.research_max_pages_to_fetch
        )
        self.max_results_per_query = (
            max_results_per_query
            if max_results_per_query is not None
            else settings.search_max_results_per_query
        )
        self.max_supplementary_sources = (
            max_supplementary_sources
            if max_supplementary_sources is not None
            else settings.research_max_supplementary_sources
        )

    async def process(self, payload: ResearchRequest) -> ResearchResult:
        return await self.research(payload.topic)

    @staticmethod
    def build_queries(topic: str) -> list[str]:
        year = date.today().year
        return [
            f"{topic} key facts",
            f"{topic} latest information {year}",
            f"{topic} statistics and data",
        ]

    async def _run_searches(self, queries: list[str]) -> tuple[list[SearchResult], list[str]]:
        """Fan out one chain search per query; merge only after all settle."""
        raw_results = await asyncio.gather(
            *(self.chain.search(query, max_results=self.max_results_per_query) for query in queries),
            return_exceptions=True,
        )

        merged: list[SearchResult] = []
        errors: list[str] = []
        for query, item in zip(queries, raw_results):
            if isinstance(item, BaseException):
                errors.append(f'Query "{query}": {item}')
                logger.warning(f'Search query "{query}" failed: {item}')
                continue
            merged.extend(item)
        return merged, errors

    async def _fetch_pages(self, results: list[SearchResult]) -> dict[str, str]:
        to_fetch = results[: self.max_pages_to_fetch]
        texts = await asyncio.gather(
            *(self.fetch_page(result.url) for result in to_fetch),
            return_exceptions=True,
        )

        page_texts: dict[str, str] = {}
        for result, text in zip(to_fetch, texts):
            if isinstance(text, BaseException):
                logger.debug(f"Page fetch raised for {result.url}: {text}")
                continue
            if text:
                page_texts[result.url] = text
        return page_texts

    def build_sources(
        self,
        unique_results: list[SearchResult],
        facts: list[ResearchFact],
    ) -> list[ResearchSource]:
        """Contributing sources first, then a few unused results as context."""
        retrieved_at = utc_now()
        fact_keys = {web_utils.normalize_url_key(f.source_url) for f in facts}

        contributing = [
            r for r in unique_results if web_utils.normalize_url_key(r.url) in fact_keys
        ]
        supplementary = [
            r for r in unique_results if web_utils.normalize_url_key(r.url) not in fact_keys
        ][: self.max_supplementary_sources]

        return [
            ResearchSource(title=r.title, url=r.url, snippet=r.snippet, retrieved_at=retrieved_at)
            for r in contributing + supplementary
        ]

    async def research(self, topic: str) -> ResearchResult:
        topic = topic.strip()
        if not topic:
            raise StageInputError("A non-empty topic is required for research")

        queries = self.build_queries(topic)
        all_results, search_errors = await self._run_searches(queries)
        unique_results = deduplicate_results(all_results)
        page_texts = await self._fetch_pages(unique_results)

        facts = fact_extractor.extract_facts(unique_results, page_texts, self.target_facts)
        sources = self.build_sources(unique_results, facts)

        summary_parts = [
            f'Research on "{topic}" complete.',
            f"Found {len(facts)} key facts from {len(sources)} sources.",
        ]
        if search_errors:
            summary_parts.append(f"{len(search_errors)} search query(ies) encountered errors.")

        log_service.log_event(
            event_type="research_completed",
            message=f"Research finished for {topic[:100]}",
            results=len(unique_results),
            pages_fetched=len(page_texts),
            facts=len(facts),
            sources=len(sources),
            search_errors=len(search_errors),
        )

        return ResearchResult(
            topic=topic,
            summary=" ".join(summary_parts),
            facts=facts,
            sources=sources,
            search_queries=queries,
        )
