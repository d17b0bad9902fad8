from __future__ import annotations

import random
from typing import Any

from draftdesk.agents.base import BaseAgent
from draftdesk.agents.editor_agent import EditorAgent
from draftdesk.agents.research_agent import ResearchAgent
from draftdesk.agents.writer_agent import WriterAgent


class AgentRegistry:
    """Lookup table of pipeline agents, owned by whoever created it."""

    def __init__(self) -> None:
        self._agents: dict[str, BaseAgent] = {}

    def register(self, agent: BaseAgent) -> None:
        self._agents[agent.name] = agent

    def unregister(self, name: str) -> None:
        self._agents.pop(name, None)

    def get(self, name: str) -> BaseAgent:
        try:
            return self._agents[name]
        except KeyError:
            raise KeyError(f'Agent "{name}" is not registered') from None

    def all(self) -> list[BaseAgent]:
        return list(self._agents.values())

    def describe(self) -> list[dict[str, Any]]:
        return [agent.status() for agent in self._agents.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._agents


def build_default_registry(rng: random.Random | None = None) -> AgentRegistry:
    registry = AgentRegistry()
    registry.register(ResearchAgent())
    registry.register(WriterAgent(rng=rng))
    registry.register(EditorAgent())
    return registry
