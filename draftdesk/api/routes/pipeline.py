from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from draftdesk.agents.orchestrator import PIPELINE_AGENTS, PipelineOrchestrator
from draftdesk.api.deps import get_orchestrator
from draftdesk.models.pipeline import DEFAULT_TONE, VALID_TONES, PipelineStatus
from draftdesk.models.schemas import ErrorResponse, OrchestrateRequest

router = APIRouter(prefix="/api/orchestrate", tags=["pipeline"])


@router.post(
    "",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid topic or tone"},
        502: {"description": "Research failed; body is the failed OrchestrationResult"},
    },
)
async def orchestrate(
    request: OrchestrateRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Run research, writer and editor for one topic.

    Completed and partial runs return 200; a failed run returns 502 with the
    same body so callers can still read the step table.
    """
    result = await orchestrator.run(request.topic, request.tone)
    status_code = 502 if result.status == PipelineStatus.FAILED else 200
    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(mode="json", by_alias=True),
    )


@router.get("")
async def describe_orchestrate():
    return {
        "endpoint": "/api/orchestrate",
        "method": "POST",
        "description": "Runs the research, writer and editor agents in sequence for a topic",
        "pipeline": list(PIPELINE_AGENTS),
        "body": {
            "topic": "string (required)",
            "tone": f"one of {', '.join(VALID_TONES)} (default {DEFAULT_TONE})",
        },
        "statuses": [status.value for status in PipelineStatus],
    }
