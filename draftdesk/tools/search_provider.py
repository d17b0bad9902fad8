from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from loguru import logger

from draftdesk.config import settings
from draftdesk.services import logger as log_service
from draftdesk.tools.base_search import ProviderAttempt, SearchProvider, SearchResult
from draftdesk.tools.duckduckgo_search import DuckDuckGoHTMLProvider, DuckDuckGoLiteProvider
from draftdesk.tools.wikipedia_search import WikipediaProvider

PROVIDER_CLASSES: dict[str, type[SearchProvider]] = {
    DuckDuckGoHTMLProvider.name: DuckDuckGoHTMLProvider,
    DuckDuckGoLiteProvider.name: DuckDuckGoLiteProvider,
    WikipediaProvider.name: WikipediaProvider,
}


@dataclass
class SearchResponse:
    results: list[SearchResult]
    provider: str | None
    fallback_from: str | None = None
    fallback_reason: str | None = None
    attempts: list[ProviderAttempt] = field(default_factory=list)


class SearchProviderChain:
    """Tries providers one at a time, in priority order.

    The first provider returning a non-empty list wins; results are never
    merged across providers. When every provider fails the chain answers with
    an empty list rather than raising.
    """

    def __init__(self, providers: Sequence[SearchProvider]):
        if not providers:
            raise ValueError("SearchProviderChain needs at least one provider")
        self.providers = list(providers)

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self.providers]

    async def run(self, query: str, *, max_results: int = 10) -> SearchResponse:
        attempts: list[ProviderAttempt] = []

        for provider in self.providers:
            attempt = await provider.attempt(query, max_results=max_results)
            attempts.append(attempt)
            log_service.log_provider_attempt(
                provider=provider.name,
                query=query,
                status="success" if attempt.usable else "failed",
                results_count=len(attempt.results),
                duration_ms=attempt.duration_ms,
                error=attempt.error,
            )
            if not attempt.usable:
                continue

            failed = attempts[:-1]
            return SearchResponse(
                results=attempt.results[:max_results],
                provider=provider.name,
                fallback_from=failed[0].provider if failed else None,
                fallback_reason="; ".join(a.error or "" for a in failed) if failed else None,
                attempts=attempts,
            )

        logger.warning(f"All search providers failed for query: {query[:100]}")
        return SearchResponse(results=[], provider=None, attempts=attempts)

    async def search(self, query: str, *, max_results: int = 10) -> list[SearchResult]:
        response = await self.run(query, max_results=max_results)
        return response.results


def build_default_chain(order: Sequence[str] | None = None) -> SearchProviderChain:
    """Build a chain from provider names, defaulting to SEARCH_PROVIDER_ORDER."""
    names = list(order) if order is not None else settings.provider_order_list
    providers: list[SearchProvider] = []
    for name in names:
        provider_cls = PROVIDER_CLASSES.get(name)
        if provider_cls is None:
            raise ValueError(f"Unsupported search provider: {name}")
        providers.append(provider_cls())
    return SearchProviderChain(providers)

