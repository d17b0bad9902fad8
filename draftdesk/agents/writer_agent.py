from __future__ import annotations

import random
from typing import Sequence

from draftdesk.agents.base import BaseAgent
from draftdesk.config import settings
from draftdesk.exceptions import StageInputError
from draftdesk.models.pipeline import (
    DEFAULT_TONE,
    ArticleTone,
    ResearchFact,
    ResearchSource,
    WriterResult,
)
from draftdesk.models.schemas import WriteRequest
from draftdesk.services import article_composer


class WriterAgent(BaseAgent):
    """Drafts a short cited article from research facts."""

    name = "writer"
    description = "Generates a ~300-word article from research data, maintaining tone and citing sources"
    capabilities = ("article-generation", "tone-adaptation", "source-citation")
    input_model = WriteRequest

    def __init__(self, rng: random.Random | None = None, *, target_word_count: int | None = None):
        super().__init__()
        self.rng = rng or random.Random()
        self.target_word_count = target_word_count or settings.writer_target_word_count

    async def process(self, payload: WriteRequest) -> WriterResult:
        return self.write(payload.topic, payload.facts, payload.sources, payload.tone)

    def write(
        self,
        topic: str,
        facts: Sequence[ResearchFact],
        sources: Sequence[ResearchSource] = (),
        tone: ArticleTone = DEFAULT_TONE,
    ) -> WriterResult:
        if not facts:
            raise StageInputError("At least one research fact is required to write an article")

        composed = article_composer.compose_article(
            topic,
            facts,
            sources,
            tone,
            target_word_count=self.target_word_count,
            rng=self.rng,
        )
        return WriterResult(
            title=composed.title,
            article=composed.article,
            tone=tone,
            word_count=composed.word_count,
            citations=composed.citations,
            topic=topic,
        )
