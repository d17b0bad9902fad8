from __future__ import annotations

from typing import Sequence

from draftdesk.agents.base import BaseAgent
from draftdesk.exceptions import StageInputError
from draftdesk.models.pipeline import DEFAULT_TONE, ArticleCitation, ArticleTone, EditorResult
from draftdesk.models.schemas import EditRequest
from draftdesk.services import article_editor


class EditorAgent(BaseAgent):
    """Tightens a drafted article and proposes headlines."""

    name = "editor"
    description = (
        "Reviews a drafted article for clarity, grammar, and engagement, and suggests catchy headlines"
    )
    capabilities = (
        "grammar-check",
        "clarity-improvement",
        "redundancy-removal",
        "headline-generation",
        "quality-scoring",
    )
    input_model = EditRequest

    async def process(self, payload: EditRequest) -> EditorResult:
        return self.edit(
            payload.title,
            payload.article,
            payload.topic,
            payload.tone,
            payload.citations,
        )

    def edit(
        self,
        title: str,
        article: str,
        topic: str,
        tone: ArticleTone = DEFAULT_TONE,
        citations: Sequence[ArticleCitation] = (),
    ) -> EditorResult:
        if not article or not article.strip():
            raise StageInputError("A non-empty 'article' string is required for editing")

        outcome = article_editor.edit_article(article, title, topic, tone)
        return EditorResult(
            original_title=title,
            edited_title=outcome.edited_title,
            headline_suggestions=outcome.headline_suggestions,
            original_article=article,
            edited_article=outcome.edited_article,
            changes=outcome.changes,
            quality_score=outcome.quality_score,
            word_count=len(outcome.edited_article.split()),
            topic=topic,
            tone=tone,
            citations=list(citations),
        )
