from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from draftdesk.exceptions import ProviderBlockedError
from draftdesk.tools import duckduckgo_search
from draftdesk.tools.base_search import SearchProvider, SearchResult
from draftdesk.tools.duckduckgo_search import (
    DDG_HTML_URL,
    DDG_LITE_URL,
    DuckDuckGoHTMLProvider,
    DuckDuckGoLiteProvider,
)
from draftdesk.tools.search_provider import SearchProviderChain, build_default_chain
from draftdesk.tools.wikipedia_search import WikipediaProvider


HTML_RESULTS = """
<html><body>
<div class="result results_links results_links_deep web-result">
  <div class="links_main links_deep result__body">
    <h2 class="result__title">
      <a rel="nofollow" class="result__a"
         href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fwww.iea.org%2Freports%2Fsolar&amp;rut=abc">Solar PV - IEA</a>
    </h2>
    <a class="result__url" href="#">www.iea.org/reports/solar</a>
    <a class="result__snippet" href="#">Solar PV generation increased by a record 270 TWh in 2022.</a>
  </div>
</div>
<div class="result results_links result--ad">
  <h2 class="result__title"><a class="result__a" href="https://duckduckgo.com/y.js?ad_provider=x">Cheap panels</a></h2>
  <a class="result__snippet" href="#">Buy now and save.</a>
</div>
<div class="result results_links web-result">
  <h2 class="result__title"><a class="result__a" href="https://en.wikipedia.org/wiki/Solar_power">Solar power - Wikipedia</a></h2>
  <a class="result__url" href="#">en.wikipedia.org/wiki/Solar_power</a>
  <a class="result__snippet" href="#">Solar power is the conversion of energy from sunlight into electricity.</a>
</div>
</body></html>
"""

LITE_RESULTS = """
<html><body><table>
<tr class="result-sponsored"><td>1.</td><td><a class="result-link" href="https://duckduckgo.com/y.js?ad_provider=x">Sponsored wind</a></td></tr>
<tr><td>&nbsp;</td><td class="result-snippet">Sponsored snippet text.</td></tr>
<tr><td>1.&nbsp;</td><td><a rel="nofollow" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fexample.org%2Fwind" class="result-link">Wind power facts</a></td></tr>
<tr><td>&nbsp;</td><td class="result-snippet">Wind supplied 7% of global electricity in 2022.</td></tr>
<tr><td>&nbsp;</td><td><span class="link-text">example.org/wind</span></td></tr>
<tr><td>2.&nbsp;</td><td><a rel="nofollow" href="https://example.com/storage" class="result-link">Grid storage</a></td></tr>
<tr><td>&nbsp;</td><td class="result-snippet">Battery storage doubled last year.</td></tr>
<tr><td>&nbsp;</td><td><span class="link-text">example.com/storage</span></td></tr>
</table></body></html>
"""

WIKI_SEARCH = {
    "query": {
        "search": [
            {"title": "Solar power", "snippet": '<span class="searchmatch">Solar</span> power is energy'},
            {"title": "Solar panel", "snippet": 'A <span class="searchmatch">solar</span> panel is a device'},
        ]
    }
}

WIKI_EXTRACTS = {
    "query": {
        "pages": [
            {
                "title": "Solar power",
                "extract": "Solar power is the conversion of energy from sunlight into electricity.",
            },
            {"title": "Solar panel", "missing": True},
        ]
    }
}


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", payload=None):
        self.status_code = status_code
        self.text = text
        self._payload = payload

    def json(self):
        return self._payload


class FakeClient:
    """Routes DuckDuckGo POSTs and MediaWiki GETs to canned responses."""

    def __init__(self, posts=None, wiki_search=None, wiki_extracts=None):
        self.posts = posts or {}
        self.wiki_search = wiki_search
        self.wiki_extracts = wiki_extracts
        self.calls: list[tuple[str, dict]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def post(self, url, *args, **kwargs):
        self.calls.append((url, kwargs.get("data", {})))
        response = self.posts.get(url)
        if isinstance(response, Exception):
            raise response
        return response

    async def get(self, url, *args, params=None, **kwargs):
        params = params or {}
        self.calls.append((url, params))
        payload = self.wiki_search if params.get("list") == "search" else self.wiki_extracts
        return FakeResponse(200, text="{}", payload=payload)


class StaticProvider(SearchProvider):
    def __init__(self, name: str, results=None, error: Exception | None = None):
        super().__init__(timeout=1.0, min_body_chars=0)
        self.name = name
        self.results = results or []
        self.error = error
        self.calls = 0

    async def search(self, query: str, *, max_results: int = 10) -> list[SearchResult]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.results[:max_results]


def test_resolve_result_url_decodes_redirect():
    href = "//duckduckgo.com/l/?uddg=https%3A%2F%2Fexample.com%2Fa%3Fb%3D1&rut=xyz"

    assert duckduckgo_search.resolve_result_url(href) == "https://example.com/a?b=1"


def test_resolve_result_url_falls_back_to_displayed_url():
    href = "/l/?uddg=&rut=xyz"

    assert duckduckgo_search.resolve_result_url(href, "example.com/page") == "https://example.com/page"


def test_resolve_result_url_upgrades_protocol_relative_links():
    assert duckduckgo_search.resolve_result_url("//example.com/x") == "https://example.com/x"


def test_parse_html_results_skips_ads_and_resolves_links():
    results = duckduckgo_search.parse_html_results(HTML_RESULTS, max_results=10)

    assert [r.url for r in results] == [
        "https://www.iea.org/reports/solar",
        "https://en.wikipedia.org/wiki/Solar_power",
    ]
    assert results[0].title == "Solar PV - IEA"
    assert results[0].snippet == "Solar PV generation increased by a record 270 TWh in 2022."


def test_parse_html_results_respects_max_results():
    assert len(duckduckgo_search.parse_html_results(HTML_RESULTS, max_results=1)) == 1


def test_parse_lite_results_reads_rows():
    results = duckduckgo_search.parse_lite_results(LITE_RESULTS, max_results=10)

    assert [r.title for r in results] == ["Wind power facts", "Grid storage"]
    assert results[0].url == "https://example.org/wind"
    assert results[0].snippet == "Wind supplied 7% of global electricity in 2022."
    assert results[1].url == "https://example.com/storage"


def test_check_response_flags_short_bodies_and_markers():
    provider = DuckDuckGoHTMLProvider(min_body_chars=100)

    with pytest.raises(ProviderBlockedError, match="too short"):
        provider.check_response(200, "<html></html>")
    with pytest.raises(ProviderBlockedError, match="block marker"):
        provider.check_response(200, "x" * 200 + '<div class="anomaly-modal">')
    with pytest.raises(ProviderBlockedError, match="status 403"):
        provider.check_response(403, "x" * 200)

    provider.check_response(200, "x" * 200)


@pytest.mark.asyncio
async def test_duckduckgo_html_provider_posts_query_and_parses():
    client = FakeClient(posts={DDG_HTML_URL: FakeResponse(200, text=HTML_RESULTS)})

    with patch("draftdesk.tools.duckduckgo_search.httpx.AsyncClient", return_value=client):
        provider = DuckDuckGoHTMLProvider(region="uk-en", min_body_chars=100)
        results = await provider.search("solar power", max_results=5)

    assert len(results) == 2
    assert client.calls == [(DDG_HTML_URL, {"q": "solar power", "kl": "uk-en"})]


@pytest.mark.asyncio
async def test_provider_attempt_reports_block_instead_of_raising():
    client = FakeClient(posts={DDG_LITE_URL: FakeResponse(200, text="<html>blocked</html>")})

    with patch("draftdesk.tools.duckduckgo_search.httpx.AsyncClient", return_value=client):
        attempt = await DuckDuckGoLiteProvider(min_body_chars=500).attempt("wind")

    assert not attempt.usable
    assert attempt.results == []
    assert "duckduckgo_lite" in attempt.error
    assert "too short" in attempt.error


@pytest.mark.asyncio
async def test_wikipedia_provider_uses_extracts_then_snippets():
    client = FakeClient(wiki_search=WIKI_SEARCH, wiki_extracts=WIKI_EXTRACTS)

    with patch("draftdesk.tools.wikipedia_search.httpx.AsyncClient", return_value=client):
        results = await WikipediaProvider(language="en").search("solar", max_results=5)

    assert [r.title for r in results] == ["Solar power", "Solar panel"]
    assert results[0].url == "https://en.wikipedia.org/wiki/Solar_power"
    assert results[0].snippet.startswith("Solar power is the conversion")
    assert results[1].snippet == "A solar panel is a device"
    extract_params = client.calls[1][1]
    assert extract_params["prop"] == "extracts"
    assert extract_params["titles"] == "Solar power|Solar panel"


@pytest.mark.asyncio
async def test_wikipedia_provider_falls_back_to_snippets_on_extract_error():
    client = FakeClient(wiki_search=WIKI_SEARCH, wiki_extracts={"error": {"info": "too many titles"}})

    with patch("draftdesk.tools.wikipedia_search.httpx.AsyncClient", return_value=client):
        results = await WikipediaProvider().search("solar", max_results=5)

    assert [r.snippet for r in results] == ["Solar power is energy", "A solar panel is a device"]


@pytest.mark.asyncio
async def test_wikipedia_provider_returns_empty_without_hits():
    client = FakeClient(wiki_search={"query": {"search": []}})

    with patch("draftdesk.tools.wikipedia_search.httpx.AsyncClient", return_value=client):
        attempt = await WikipediaProvider().attempt("zzzz")

    assert attempt.error == "wikipedia: no results"
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_chain_falls_back_through_blocked_providers_to_wikipedia():
    client = FakeClient(
        posts={
            DDG_HTML_URL: FakeResponse(200, text="<html></html>"),
            DDG_LITE_URL: FakeResponse(200, text="x" * 600 + "Bots use DuckDuckGo too"),
        },
        wiki_search=WIKI_SEARCH,
        wiki_extracts=WIKI_EXTRACTS,
    )
    chain = SearchProviderChain(
        [
            DuckDuckGoHTMLProvider(min_body_chars=500),
            DuckDuckGoLiteProvider(min_body_chars=500),
            WikipediaProvider(),
        ]
    )

    with patch("httpx.AsyncClient", return_value=client):
        response = await chain.run("solar", max_results=5)

    assert response.provider == "wikipedia"
    assert response.fallback_from == "duckduckgo_html"
    assert "too short" in response.fallback_reason
    assert "block marker" in response.fallback_reason
    assert [r.title for r in response.results] == ["Solar power", "Solar panel"]
    assert [a.provider for a in response.attempts] == [
        "duckduckgo_html",
        "duckduckgo_lite",
        "wikipedia",
    ]


@pytest.mark.asyncio
async def test_chain_stops_at_first_usable_provider():
    primary = StaticProvider("primary", results=[SearchResult("T", "https://a.com", "S")])
    secondary = StaticProvider("secondary", results=[SearchResult("U", "https://b.com", "S")])

    response = await SearchProviderChain([primary, secondary]).run("q")

    assert response.provider == "primary"
    assert response.fallback_from is None
    assert secondary.calls == 0


@pytest.mark.asyncio
async def test_chain_treats_empty_results_as_failure():
    empty = StaticProvider("empty")
    backup = StaticProvider("backup", results=[SearchResult("T", "https://a.com", "S")])

    response = await SearchProviderChain([empty, backup]).run("q")

    assert response.provider == "backup"
    assert response.fallback_reason == "empty: no results"


@pytest.mark.asyncio
async def test_chain_returns_empty_list_when_every_provider_fails():
    chain = SearchProviderChain(
        [
            StaticProvider("a", error=ProviderBlockedError("a", "captcha")),
            StaticProvider("b", error=httpx.ConnectTimeout("timed out")),
            StaticProvider("c", error=ValueError("bad json")),
        ]
    )

    results = await chain.search("q")

    assert results == []


@pytest.mark.asyncio
async def test_chain_moves_on_when_a_provider_raises_unexpectedly():
    broken = StaticProvider("broken", error=KeyError("result__a"))
    backup = StaticProvider("backup", results=[SearchResult("T", "https://a.com", "S")])

    response = await SearchProviderChain([broken, backup]).run("q")

    assert response.provider == "backup"
    assert response.fallback_from == "broken"
    assert "KeyError" in response.fallback_reason


@pytest.mark.asyncio
async def test_chain_search_does_not_raise_on_parse_errors():
    chain = SearchProviderChain(
        [
            StaticProvider("a", error=AttributeError("NoneType has no attribute get")),
            StaticProvider("b", error=TypeError("unexpected payload")),
        ]
    )

    assert await chain.search("q") == []

def test_build_default_chain_follows_configured_order():
    chain = build_default_chain(["wikipedia", "duckduckgo_lite"])

    assert chain.provider_names == ["wikipedia", "duckduckgo_lite"]


def test_build_default_chain_rejects_unknown_provider():
    with pytest.raises(ValueError):
        build_default_chain(["altavista"])


def test_chain_requires_providers():
    with pytest.raises(ValueError):
        SearchProviderChain([])
