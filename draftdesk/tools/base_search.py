from __future__ import annotations

import time
from dataclasses import dataclass, field

import httpx
from loguru import logger

from draftdesk.config import settings
from draftdesk.exceptions import ProviderBlockedError, ProviderError

BLOCK_MARKERS = (
    "anomaly-modal",
    "bots use duckduckgo too",
    "g-recaptcha",
    "cf-challenge",
    "our systems have detected unusual traffic",
)


@dataclass
class SearchResult:
    """Normalized search result from any provider."""
    title: str
    url: str
    snippet: str


@dataclass
class ProviderAttempt:
    provider: str
    results: list[SearchResult] = field(default_factory=list)
    error: str | None = None
    duration_ms: int = 0

    @property
    def usable(self) -> bool:
        return self.error is None and bool(self.results)


class SearchProvider:
    """One search backend in the fallback chain.

    Subclasses implement `search`, raising `ProviderError` when the backend is
    unusable. `attempt` wraps it so the chain never sees an exception.
    """

    name: str = "base"
    block_markers: tuple[str, ...] = BLOCK_MARKERS

    def __init__(
        self,
        *,
        timeout: float | None = None,
        min_body_chars: int | None = None,
    ):
        self.timeout = timeout if timeout is not None else settings.search_timeout_seconds
        self.min_body_chars = (
            min_body_chars
            if min_body_chars is not None
            else settings.search_block_min_body_chars
        )

    async def search(self, query: str, *, max_results: int = 10) -> list[SearchResult]:
        raise NotImplementedError(f"Provider {self.name} does not implement search")

    async def attempt(self, query: str, *, max_results: int = 10) -> ProviderAttempt:
        t0 = time.monotonic()
        try:
            results = await self.search(query, max_results=max_results)
        except ProviderError as e:
            return ProviderAttempt(
                provider=self.name,
                error=str(e),
                duration_ms=int((time.monotonic() - t0) * 1000),
            )
        except (httpx.HTTPError, ValueError) as e:
            return ProviderAttempt(
                provider=self.name,
                error=f"{self.name}: {type(e).__name__}: {e}",
                duration_ms=int((time.monotonic() - t0) * 1000),
            )
        except Exception as e:
            logger.warning(f"Provider {self.name} raised unexpectedly: {type(e).__name__}: {e}")
            return ProviderAttempt(
                provider=self.name,
                error=f"{self.name}: unexpected {type(e).__name__}: {e}",
                duration_ms=int((time.monotonic() - t0) * 1000),
            )

        elapsed_ms = int((time.monotonic() - t0) * 1000)
        if not results:
            return ProviderAttempt(
                provider=self.name,
                error=f"{self.name}: no results",
                duration_ms=elapsed_ms,
            )
        return ProviderAttempt(provider=self.name, results=results, duration_ms=elapsed_ms)

    def check_response(self, status_code: int, body: str) -> None:
        """Raise ProviderBlockedError when the response looks like a block page."""
        if status_code != 200:
            raise ProviderBlockedError(self.name, f"unexpected status {status_code}")
        if len(body) < self.min_body_chars:
            raise ProviderBlockedError(
                self.name,
                f"response body too short ({len(body)} < {self.min_body_chars} chars)",
            )
        lowered = body.lower()
        for marker in self.block_markers:
            if marker in lowered:
                raise ProviderBlockedError(self.name, f"block marker found: {marker!r}")
