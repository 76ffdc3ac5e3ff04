"""Provider gateway — one call signature over several backends, with fallback."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable

from storymaster.adapters.base import LLMProvider
from storymaster.adapters.providers import create_providers
from storymaster.config import Settings
from storymaster.exceptions import AllProvidersFailed
from storymaster.schemas.llm import GenerationOptions, LLMResponse

logger = logging.getLogger(__name__)


class ProviderGateway:
    """Tries providers one at a time until one succeeds.

    The attempt order is the preferred provider (when registered) followed by
    the rest of ``fallback_order``. Each provider is attempted at most once per
    call, and each attempt is bounded by ``timeout_seconds``.
    """

    def __init__(
        self,
        providers: Iterable[LLMProvider],
        fallback_order: list[str] | None = None,
        timeout_seconds: float | None = 30.0,
    ):
        self.providers: dict[str, LLMProvider] = {p.name: p for p in providers}
        self.fallback_order = (
            list(fallback_order) if fallback_order is not None else list(self.providers)
        )
        self.timeout_seconds = timeout_seconds

    def attempt_order(self, preferred: str | None = None) -> list[str]:
        order = [name for name in self.fallback_order if name in self.providers]
        if preferred and preferred in self.providers:
            order = [preferred] + [name for name in order if name != preferred]
        return order

    async def generate_text(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> LLMResponse:
        options = options or GenerationOptions()
        failures: dict[str, str] = {}

        for name in self.attempt_order(options.preferred_provider):
            provider = self.providers[name]
            try:
                return await asyncio.wait_for(
                    provider.generate_text(prompt, options), timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError:
                failures[name] = f"timed out after {self.timeout_seconds}s"
                logger.warning("Provider %s timed out after %ss", name, self.timeout_seconds)
            except Exception as exc:
                failures[name] = str(exc)
                logger.warning("Provider %s failed: %s", name, exc)

        raise AllProvidersFailed(details={"failures": failures})

    def estimate_tokens(self, text: str, provider_name: str | None = None) -> int:
        name = provider_name or next(iter(self.attempt_order()), None)
        provider = self.providers.get(name) if name else None
        if provider is None:
            return math.ceil(len(text) / 4)
        return provider.estimate_tokens(text)


def build_gateway(settings: Settings) -> ProviderGateway:
    providers = create_providers(settings.provider_fallback_order)
    return ProviderGateway(
        providers,
        fallback_order=settings.provider_fallback_order,
        timeout_seconds=settings.provider_timeout_seconds,
    )
