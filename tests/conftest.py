from __future__ import annotations

import random

import pytest

from draftdesk.agents.base import BaseAgent
from draftdesk.agents.editor_agent import EditorAgent
from draftdesk.agents.registry import AgentRegistry
from draftdesk.agents.writer_agent import WriterAgent
from draftdesk.models.pipeline import ResearchFact, ResearchResult, ResearchSource
from draftdesk.models.schemas import ResearchRequest

FACT_TEXTS = [
    "Global solar capacity reached 1,200 gigawatts in 2022, according to the energy agency.",
    "Offshore wind farms now power roughly nine million European homes each winter.",
    "Battery storage costs dropped 80% between 2013 and 2023 as manufacturing scaled.",
    "Hydropower remains the largest renewable source, supplying about 15% of electricity.",
    "Researchers found that rooftop panels cut household bills by $500 per year on average.",
    "Geothermal plants operate continuously because underground heat never switches off.",
    "China installed more turbines last year than every other country combined.",
]


class StubAgent(BaseAgent):
    """Pipeline stage double that returns a canned result or raises."""

    def __init__(self, name: str, input_model, result=None, error: Exception | None = None):
        super().__init__()
        self.name = name
        self.input_model = input_model
        self.result = result
        self.error = error
        self.payloads: list = []

    async def process(self, payload):
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return self.result


def make_research_result(topic: str = "renewable energy", fact_count: int = 7) -> ResearchResult:
    facts = [
        ResearchFact(
            fact=text,
            source_url=f"https://site{i}.example.com/page",
            source_title=f"Site {i}",
        )
        for i, text in enumerate(FACT_TEXTS[:fact_count])
    ]
    sources = [
        ResearchSource(title=f.source_title, url=f.source_url, snippet=f.fact) for f in facts
    ]
    return ResearchResult(
        topic=topic,
        summary=f'Research on "{topic}" complete. Found {len(facts)} key facts from {len(sources)} sources.',
        facts=facts,
        sources=sources,
        search_queries=[f"{topic} key facts"],
    )


def build_registry(research=None, writer=None, editor=None) -> AgentRegistry:
    registry = AgentRegistry()
    registry.register(
        research or StubAgent("research", ResearchRequest, result=make_research_result())
    )
    registry.register(writer or WriterAgent(rng=random.Random(11)))
    registry.register(editor or EditorAgent())
    return registry


@pytest.fixture
def registry_factory():
    return build_registry


@pytest.fixture
def stub_agent():
    return StubAgent


@pytest.fixture
def research_result_factory():
    return make_research_result
