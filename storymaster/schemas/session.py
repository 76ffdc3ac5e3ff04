"""Agent session records — one per orchestration call."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ANONYMOUS_USER = "anonymous"
DEFAULT_PROJECT = "default"
DEFAULT_DOCUMENT = "default"


class UsageMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str
    model: str
    tokens_used: int = Field(..., ge=0)
    cost: float = Field(..., ge=0.0)
    latency_ms: float = Field(..., ge=0.0)


class SessionOutputs(BaseModel):
    model_config = ConfigDict(frozen=True)

    response: str


class AgentSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    agent_id: str
    user_id: str = ANONYMOUS_USER
    project_id: str = DEFAULT_PROJECT
    document_id: str = DEFAULT_DOCUMENT
    inputs: dict[str, Any] = {}
    outputs: SessionOutputs
    usage: UsageMetadata
    created_at: datetime
    updated_at: datetime


class AgentExecuteResponse(BaseModel):
    session: AgentSession
    document_version: int | None = None  # set when the response was applied
