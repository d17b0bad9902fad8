from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel


class AgentState(StrEnum):
    IDLE = "idle"
    PROCESSING = "processing"
    ERROR = "error"


class BaseAgent:
    """Base class for the pipeline stages.

    Subclasses set `name`, `description`, `capabilities` and `input_model`, and
    implement `process`. `run` validates a raw payload into `input_model`,
    calls `process`, and keeps `state`/`last_error` current.
    """

    name: str = "base"
    description: str = ""
    capabilities: tuple[str, ...] = ()
    input_model: type[BaseModel] | None = None

    def __init__(self) -> None:
        self.state = AgentState.IDLE
        self.last_error: str | None = None

    async def process(self, payload: Any) -> BaseModel:
        """Run the stage on a validated payload.

        Must be overridden by subclasses.
        """
        raise NotImplementedError(f"Agent {self.name} does not implement process")

    def validate_input(self, payload: dict[str, Any] | BaseModel) -> Any:
        if self.input_model is None or isinstance(payload, self.input_model):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        return self.input_model.model_validate(payload)

    async def run(self, payload: dict[str, Any] | BaseModel) -> BaseModel:
        validated = self.validate_input(payload)
        self.state = AgentState.PROCESSING
        try:
            result = await self.process(validated)
        except Exception as e:
            self.state = AgentState.ERROR
            self.last_error = str(e)
            raise
        self.state = AgentState.IDLE
        self.last_error = None
        return result

    def status(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "capabilities": list(self.capabilities),
            "state": self.state.value,
            "last_error": self.last_error,
        }
