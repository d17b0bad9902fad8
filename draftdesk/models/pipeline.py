from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ArticleTone = Literal["professional", "casual", "academic", "journalistic"]
VALID_TONES: tuple[str, ...] = ("professional", "casual", "academic", "journalistic")
DEFAULT_TONE: ArticleTone = "professional"

EditChangeType = Literal["grammar", "clarity", "redundancy", "headline", "structure"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Stage payload serialized with camelCase keys, accepting either form on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Research ---


class ResearchFact(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    fact: str
    source_url: str
    source_title: str


class ResearchSource(CamelModel):
    title: str
    url: str
    snippet: str
    retrieved_at: datetime = Field(default_factory=utc_now)


class ResearchResult(CamelModel):
    topic: str
    summary: str
    facts: list[ResearchFact] = Field(default_factory=list)
    sources: list[ResearchSource] = Field(default_factory=list)
    search_queries: list[str] = Field(default_factory=list)
    completed_at: datetime = Field(default_factory=utc_now)


# --- Writer ---


class ArticleCitation(CamelModel):
    index: int
    source_title: str
    source_url: str


class WriterResult(CamelModel):
    title: str
    article: str
    tone: ArticleTone
    word_count: int
    citations: list[ArticleCitation] = Field(default_factory=list)
    topic: str
    generated_at: datetime = Field(default_factory=utc_now)


# --- Editor ---


class EditChange(CamelModel):
    type: EditChangeType
    original: str
    replacement: str
    reason: str


class QualityScore(CamelModel):
    overall: int
    grammar: int
    clarity: int
    structure: int
    engagement: int


class EditorResult(CamelModel):
    original_title: str
    edited_title: str
    headline_suggestions: list[str] = Field(default_factory=list)
    original_article: str
    edited_article: str
    changes: list[EditChange] = Field(default_factory=list)
    quality_score: QualityScore
    word_count: int
    topic: str
    tone: ArticleTone
    citations: list[ArticleCitation] = Field(default_factory=list)
    edited_at: datetime = Field(default_factory=utc_now)


# --- Orchestration ---


class StepStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class PipelineStatus(StrEnum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class PipelineStep(CamelModel):
    agent: str
    status: StepStatus = StepStatus.PENDING
    duration_ms: int = 0
    error: str | None = None


class OrchestrationResult(CamelModel):
    status: PipelineStatus
    topic: str
    tone: ArticleTone
    steps: list[PipelineStep]
    total_duration_ms: int
    research: ResearchResult | None = None
    article: WriterResult | None = None
    edited: EditorResult | None = None
    completed_at: datetime = Field(default_factory=utc_now)
