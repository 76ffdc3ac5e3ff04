"""Abstract base class for text-generation providers.

Add a backend by subclassing ``LLMProvider`` and implementing ``_complete``;
model selection, latency measurement and pricing live here.
"""

from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod

from storymaster.exceptions import ProviderError
from storymaster.schemas.llm import (
    Completion,
    CostPriority,
    GenerationOptions,
    LLMResponse,
    ResponseMetadata,
    TokenUsage,
)


class LLMProvider(ABC):
    """Contract that any text-generation backend must satisfy."""

    name: str = ""

    # cost priority tier → model
    models: dict[CostPriority, str] = {}

    # model → (USD per 1K prompt tokens, USD per 1K completion tokens)
    prices: dict[str, tuple[float, float]] = {}

    async def generate_text(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> LLMResponse:
        options = options or GenerationOptions()
        model = self.model_for(options)

        started = time.perf_counter()
        completion = await self._complete(
            prompt,
            model=model,
            max_tokens=options.max_tokens,
            temperature=options.temperature,
        )
        latency_ms = (time.perf_counter() - started) * 1000

        return LLMResponse(
            text=completion.text,
            tokens_used=completion.usage.total_tokens,
            cost=self.calculate_cost(model, completion.usage),
            metadata=ResponseMetadata(provider=self.name, model=model, latency_ms=latency_ms),
        )

    def estimate_tokens(self, text: str) -> int:
        """Cheap offline estimate: ~4 characters per token."""
        return math.ceil(len(text) / 4)

    def model_for(self, options: GenerationOptions) -> str:
        if options.model:
            return options.model
        model = self.models.get(options.cost_priority) or self.models.get("balanced")
        if not model:
            raise ProviderError(
                f"{self.name or type(self).__name__} has no model for cost priority "
                f"'{options.cost_priority}' and no explicit model was given",
                details={"cost_priority": options.cost_priority},
            )
        return model

    def calculate_cost(self, model: str, usage: TokenUsage) -> float:
        prompt_price, completion_price = self.prices.get(model, (0.0, 0.0))
        return (
            usage.prompt_tokens / 1000 * prompt_price
            + usage.completion_tokens / 1000 * completion_price
        )

    @abstractmethod
    async def _complete(
        self, prompt: str, *, model: str, max_tokens: int, temperature: float
    ) -> Completion:
        """Call the backend and return its text and token usage."""
