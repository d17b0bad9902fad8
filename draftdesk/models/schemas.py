from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from draftdesk.models.pipeline import (
    DEFAULT_TONE,
    ArticleCitation,
    ArticleTone,
    CamelModel,
    ResearchFact,
    ResearchSource,
)


def _require_text(value: str, field_name: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"A non-empty '{field_name}' string is required")
    return cleaned


# --- Requests ---


class OrchestrateRequest(BaseModel):
    topic: str
    tone: ArticleTone = DEFAULT_TONE

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, value: str) -> str:
        return _require_text(value, "topic")


class ResearchRequest(BaseModel):
    topic: str

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, value: str) -> str:
        return _require_text(value, "topic")


class WriteRequest(CamelModel):
    topic: str
    facts: list[ResearchFact] = Field(min_length=1)
    sources: list[ResearchSource] = Field(default_factory=list)
    tone: ArticleTone = DEFAULT_TONE

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, value: str) -> str:
        return _require_text(value, "topic")


class EditRequest(CamelModel):
    title: str = ""
    article: str
    topic: str = ""
    tone: ArticleTone = DEFAULT_TONE
    citations: list[ArticleCitation] = Field(default_factory=list)

    @field_validator("article")
    @classmethod
    def _article_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("A non-empty 'article' string is required for editing")
        return value


# --- Responses ---


class ErrorResponse(BaseModel):
    error: str


class AgentInfo(BaseModel):
    name: str
    description: str
    capabilities: list[str]
    state: str
    last_error: str | None = None


class AgentsResponse(BaseModel):
    agents: list[AgentInfo]
