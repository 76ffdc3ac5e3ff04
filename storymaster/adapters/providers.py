"""Concrete provider variants.

The network calls are not wired up: each ``_complete`` raises
``ProviderError`` so the gateway falls through to the next backend.
Deployments register working providers through ``ProviderGateway``.
"""

from __future__ import annotations

import logging

from storymaster.adapters.base import LLMProvider
from storymaster.exceptions import ProviderError
from storymaster.schemas.llm import Completion

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    name = "OpenAI"
    models = {"fast": "gpt-3.5-turbo", "balanced": "gpt-3.5-turbo", "quality": "gpt-4"}
    prices = {
        "gpt-3.5-turbo": (0.0005, 0.0015),
        "gpt-4": (0.03, 0.06),
    }

    async def _complete(
        self, prompt: str, *, model: str, max_tokens: int, temperature: float
    ) -> Completion:
        raise ProviderError("OpenAI API call not implemented", details={"model": model})


class AnthropicProvider(LLMProvider):
    name = "Anthropic"
    models = {
        "fast": "claude-3-haiku-20240307",
        "balanced": "claude-3-sonnet-20240229",
        "quality": "claude-3-opus-20240229",
    }
    prices = {
        "claude-3-haiku-20240307": (0.00025, 0.00125),
        "claude-3-sonnet-20240229": (0.003, 0.015),
        "claude-3-opus-20240229": (0.015, 0.075),
    }

    async def _complete(
        self, prompt: str, *, model: str, max_tokens: int, temperature: float
    ) -> Completion:
        raise ProviderError("Anthropic API call not implemented", details={"model": model})


class GeminiProvider(LLMProvider):
    name = "Gemini"
    models = {"fast": "gemini-pro", "balanced": "gemini-pro", "quality": "gemini-pro-vision"}
    prices = {
        "gemini-pro": (0.000125, 0.000375),
        "gemini-pro-vision": (0.000125, 0.000375),
    }

    async def _complete(
        self, prompt: str, *, model: str, max_tokens: int, temperature: float
    ) -> Completion:
        raise ProviderError("Gemini API call not implemented", details={"model": model})


PROVIDER_CLASSES: dict[str, type[LLMProvider]] = {
    cls.name: cls for cls in (OpenAIProvider, AnthropicProvider, GeminiProvider)
}


def create_providers(names: list[str]) -> list[LLMProvider]:
    """Instantiate the named variants, skipping unknown names."""
    providers: list[LLMProvider] = []
    for name in names:
        cls = PROVIDER_CLASSES.get(name)
        if cls is None:
            logger.warning("Unknown provider '%s' in configuration — skipping", name)
            continue
        providers.append(cls())
    return providers
