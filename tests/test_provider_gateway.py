"""Provider gateway tests — fallback order, exhaustion, timeouts, pricing."""

import asyncio

import pytest

from storymaster.adapters.providers import AnthropicProvider, GeminiProvider, OpenAIProvider
from storymaster.config import Settings
from storymaster.exceptions import AllProvidersFailed, ProviderError
from storymaster.schemas.llm import GenerationOptions
from storymaster.services.provider_gateway import ProviderGateway, build_gateway


@pytest.mark.asyncio
async def test_preferred_provider_fails_then_fallback_succeeds(make_provider):
    primary = make_provider("Primary", text="from primary")
    flaky = make_provider("Flaky", fail=True)
    gateway = ProviderGateway([primary, flaky], fallback_order=["Primary", "Flaky"])

    result = await gateway.generate_text("Write", GenerationOptions(preferred_provider="Flaky"))

    assert result.text == "from primary"
    assert result.metadata.provider == "Primary"
    assert len(flaky.calls) == 1
    assert len(primary.calls) == 1


@pytest.mark.asyncio
async def test_all_providers_fail_each_tried_once(make_provider):
    providers = [make_provider(name, fail=True) for name in ("A", "B", "C")]
    gateway = ProviderGateway(providers)

    with pytest.raises(AllProvidersFailed) as excinfo:
        await gateway.generate_text("Write", GenerationOptions(preferred_provider="B"))

    assert [len(p.calls) for p in providers] == [1, 1, 1]
    assert list(excinfo.value.details["failures"]) == ["B", "A", "C"]


@pytest.mark.asyncio
async def test_unknown_preferred_provider_uses_fallback_order(make_provider):
    a, b = make_provider("A", text="a"), make_provider("B", text="b")
    gateway = ProviderGateway([a, b], fallback_order=["B", "A"])

    result = await gateway.generate_text("x", GenerationOptions(preferred_provider="Nope"))

    assert result.text == "b"
    assert a.calls == []


@pytest.mark.asyncio
async def test_slow_provider_times_out_and_falls_through(make_provider):
    class SlowProvider(type(make_provider())):
        async def _complete(self, prompt, **kwargs):
            await asyncio.sleep(1)
            return await super()._complete(prompt, **kwargs)

    slow = SlowProvider("Slow")
    fast = make_provider("Fast", text="quick")
    gateway = ProviderGateway([slow, fast], timeout_seconds=0.05)

    result = await gateway.generate_text("x")

    assert result.text == "quick"


@pytest.mark.asyncio
async def test_usage_and_cost_follow_token_estimate(make_provider):
    provider = make_provider("Fake", text="abcdefgh")  # 2 tokens
    gateway = ProviderGateway([provider])
    prompt = "a" * 40  # 10 tokens

    result = await gateway.generate_text(prompt)

    assert result.tokens_used == gateway.estimate_tokens(prompt) + gateway.estimate_tokens("abcdefgh")
    assert result.tokens_used == 12
    assert result.metadata.model == "fake-1"
    assert result.cost == pytest.approx(10 / 1000 * 0.001 + 2 / 1000 * 0.002)
    assert result.metadata.latency_ms >= 0


def test_model_selection():
    anthropic = AnthropicProvider()
    assert anthropic.model_for(GenerationOptions(cost_priority="fast")) == "claude-3-haiku-20240307"
    assert anthropic.model_for(GenerationOptions()) == "claude-3-sonnet-20240229"
    assert anthropic.model_for(GenerationOptions(cost_priority="quality", model="custom")) == "custom"
    assert OpenAIProvider().model_for(GenerationOptions(cost_priority="quality")) == "gpt-4"


def test_estimate_tokens_rounds_up():
    gateway = ProviderGateway([GeminiProvider()])
    assert gateway.estimate_tokens("") == 0
    assert gateway.estimate_tokens("abcde") == 2
    assert ProviderGateway([]).estimate_tokens("abcd") == 1


@pytest.mark.asyncio
async def test_stub_providers_are_exhausted():
    gateway = build_gateway(Settings(provider_fallback_order=["Gemini", "OpenAI", "Anthropic", "Bogus"]))
    assert gateway.attempt_order() == ["Gemini", "OpenAI", "Anthropic"]

    with pytest.raises(AllProvidersFailed) as excinfo:
        await gateway.generate_text("hello")
    assert "not implemented" in excinfo.value.details["failures"]["OpenAI"]


@pytest.mark.asyncio
async def test_provider_without_model_table(make_provider):
    provider = make_provider("Bare")
    provider.models = {}

    with pytest.raises(ProviderError, match="no model for cost priority 'balanced'"):
        await provider.generate_text("Write")
    assert provider.calls == []

    result = await provider.generate_text("Write", GenerationOptions(model="custom-1"))
    assert result.metadata.model == "custom-1"

    with pytest.raises(AllProvidersFailed) as excinfo:
        await ProviderGateway([provider]).generate_text("Write")
    assert "no model" in excinfo.value.details["failures"]["Bare"]
