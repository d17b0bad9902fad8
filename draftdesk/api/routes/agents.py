from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from draftdesk.agents.registry import AgentRegistry
from draftdesk.api.deps import get_registry
from draftdesk.models.pipeline import EditorResult, ResearchResult, WriterResult
from draftdesk.models.schemas import (
    AgentInfo,
    AgentsResponse,
    EditRequest,
    ErrorResponse,
    ResearchRequest,
    WriteRequest,
)

router = APIRouter(prefix="/api/agents", tags=["agents"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid payload"},
    500: {"model": ErrorResponse, "description": "The agent raised while processing"},
}


async def _run_agent(registry: AgentRegistry, name: str, payload: BaseModel):
    agent = registry.get(name)
    try:
        return await agent.run(payload)
    except Exception as e:
        logger.error(f"Agent {name} failed: {e}")
        error = ErrorResponse(error=str(e) or type(e).__name__)
        return JSONResponse(status_code=500, content=error.model_dump())


@router.get("", response_model=AgentsResponse)
async def list_agents(registry: AgentRegistry = Depends(get_registry)):
    """List the pipeline agents and their current state."""
    return AgentsResponse(agents=[AgentInfo(**info) for info in registry.describe()])


@router.post("/research", response_model=ResearchResult, responses=_ERROR_RESPONSES)
async def run_research(request: ResearchRequest, registry: AgentRegistry = Depends(get_registry)):
    return await _run_agent(registry, "research", request)


@router.post("/writer", response_model=WriterResult, responses=_ERROR_RESPONSES)
async def run_writer(request: WriteRequest, registry: AgentRegistry = Depends(get_registry)):
    return await _run_agent(registry, "writer", request)


@router.post("/editor", response_model=EditorResult, responses=_ERROR_RESPONSES)
async def run_editor(request: EditRequest, registry: AgentRegistry = Depends(get_registry)):
    return await _run_agent(registry, "editor", request)
