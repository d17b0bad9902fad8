from __future__ import annotations

from draftdesk.agents.orchestrator import PipelineOrchestrator
from draftdesk.agents.registry import AgentRegistry, build_default_registry


def get_registry() -> AgentRegistry:
    """Fresh agents per request so agent state never leaks between callers."""
    return build_default_registry()


def get_orchestrator() -> PipelineOrchestrator:
    return PipelineOrchestrator(get_registry())
