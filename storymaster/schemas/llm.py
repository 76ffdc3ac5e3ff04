"""Provider gateway call options and results."""

from typing import Literal

from pydantic import BaseModel, Field

CostPriority = Literal["fast", "balanced", "quality"]


class GenerationOptions(BaseModel):
    max_tokens: int = Field(1000, gt=0)
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    model: str | None = None  # explicit override, wins over cost_priority
    cost_priority: CostPriority = "balanced"
    preferred_provider: str | None = None


class TokenUsage(BaseModel):
    prompt_tokens: int = Field(0, ge=0)
    completion_tokens: int = Field(0, ge=0)

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class Completion(BaseModel):
    """Raw result of one backend call, before pricing."""

    text: str
    usage: TokenUsage


class ResponseMetadata(BaseModel):
    provider: str
    model: str
    latency_ms: float = Field(0.0, ge=0.0)


class LLMResponse(BaseModel):
    text: str
    tokens_used: int = Field(..., ge=0)
    cost: float = Field(..., ge=0.0)
    metadata: ResponseMetadata
