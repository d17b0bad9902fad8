from __future__ import annotations

import time
from typing import Awaitable, Callable, TypeVar

from draftdesk.agents.registry import AgentRegistry, build_default_registry
from draftdesk.models.pipeline import (
    DEFAULT_TONE,
    ArticleTone,
    EditorResult,
    OrchestrationResult,
    PipelineStatus,
    PipelineStep,
    ResearchResult,
    StepStatus,
    WriterResult,
)
from draftdesk.models.schemas import EditRequest, OrchestrateRequest, ResearchRequest, WriteRequest
from draftdesk.services import logger as log_service

T = TypeVar("T")

PIPELINE_AGENTS = ("research", "writer", "editor")
NO_FACTS_MESSAGE = "No facts available from research to write about"


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


class PipelineOrchestrator:
    """Runs research, writer and editor in sequence for one topic.

    Each stage consumes the previous stage's typed result. A failing stage is
    recorded on its step and the remaining steps are skipped; only a research
    failure makes the whole run `failed`, anything later yields `partial`.
    The returned OrchestrationResult always describes how far the run got.
    """

    def __init__(self, registry: AgentRegistry | None = None):
        self.registry = registry or build_default_registry()

    def _log_step(self, topic: str, step: PipelineStep) -> None:
        log_service.log_pipeline_step(
            topic=topic,
            agent=step.agent,
            status=step.status.value,
            duration_ms=step.duration_ms,
            error=step.error,
        )

    async def _run_step(
        self,
        topic: str,
        step: PipelineStep,
        fn: Callable[[], Awaitable[T]],
    ) -> T:
        step.status = StepStatus.RUNNING
        self._log_step(topic, step)
        start = time.perf_counter()
        try:
            result = await fn()
        except Exception as e:
            step.duration_ms = _elapsed_ms(start)
            step.status = StepStatus.FAILED
            step.error = str(e) or type(e).__name__
            self._log_step(topic, step)
            raise
        step.duration_ms = _elapsed_ms(start)
        step.status = StepStatus.COMPLETED
        self._log_step(topic, step)
        return result

    def _skip(self, topic: str, step: PipelineStep, reason: str | None = None) -> None:
        step.status = StepStatus.SKIPPED
        step.error = reason
        self._log_step(topic, step)

    async def _research(self, topic: str) -> ResearchResult:
        return await self.registry.get("research").run(ResearchRequest(topic=topic))

    async def _write(self, research: ResearchResult, tone: ArticleTone) -> WriterResult:
        request = WriteRequest(
            topic=research.topic,
            facts=research.facts,
            sources=research.sources,
            tone=tone,
        )
        return await self.registry.get("writer").run(request)

    async def _edit(self, article: WriterResult, tone: ArticleTone) -> EditorResult:
        request = EditRequest(
            title=article.title,
            article=article.article,
            topic=article.topic,
            tone=tone,
            citations=article.citations,
        )
        return await self.registry.get("editor").run(request)

    async def run(self, topic: str, tone: ArticleTone = DEFAULT_TONE) -> OrchestrationResult:
        """Run the full pipeline.

        Raises pydantic.ValidationError for a blank topic or unknown tone before
        any stage starts. Stage failures never propagate.
        """
        request = OrchestrateRequest(topic=topic, tone=tone)
        topic, tone = request.topic, request.tone

        pipeline_start = time.perf_counter()
        research_step, writer_step, editor_step = (
            PipelineStep(agent=name) for name in PIPELINE_AGENTS
        )
        research: ResearchResult | None = None
        article: WriterResult | None = None
        edited: EditorResult | None = None

        def finish(status: PipelineStatus) -> OrchestrationResult:
            log_service.log_event(
                event_type="pipeline_finished",
                message=f"Pipeline {status.value} for {topic[:100]}",
                status=status.value,
                total_duration_ms=_elapsed_ms(pipeline_start),
            )
            return OrchestrationResult(
                status=status,
                topic=topic,
                tone=tone,
                steps=[research_step, writer_step, editor_step],
                total_duration_ms=_elapsed_ms(pipeline_start),
                research=research,
                article=article,
                edited=edited,
            )

        log_service.log_event(
            event_type="pipeline_started",
            message=f"Pipeline started for {topic[:100]}",
            tone=tone,
        )

        try:
            research = await self._run_step(topic, research_step, lambda: self._research(topic))
        except Exception:
            self._skip(topic, writer_step)
            self._skip(topic, editor_step)
            return finish(PipelineStatus.FAILED)

        if not research.facts:
            self._skip(topic, writer_step, NO_FACTS_MESSAGE)
            self._skip(topic, editor_step)
            return finish(PipelineStatus.PARTIAL)

        try:
            article = await self._run_step(topic, writer_step, lambda: self._write(research, tone))
        except Exception:
            self._skip(topic, editor_step)
            return finish(PipelineStatus.PARTIAL)

        try:
            edited = await self._run_step(topic, editor_step, lambda: self._edit(article, tone))
        except Exception:
            return finish(PipelineStatus.PARTIAL)

        return finish(PipelineStatus.COMPLETED)
