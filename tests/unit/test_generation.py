"""Tests for prompt building, pricing and generation providers."""

from types import SimpleNamespace

import pytest

from traceguard.exceptions import ConfigurationError, GenerationError
from traceguard.generation.gemini_provider import GeminiProvider
from traceguard.generation.mock_provider import MockGenerator, approx_tokens
from traceguard.generation.pricing import DEFAULT_RATE_PER_TOKEN, estimate_cost
from traceguard.generation.prompt_templates import NO_CONTEXT_MARKER, build_prompt, parse_prompt


def test_prompt_round_trip_with_context():
    prompt = build_prompt("What is a span?", "A span is a timed operation.\n\nSpans nest.")
    assert parse_prompt(prompt) == ("What is a span?", "A span is a timed operation.\n\nSpans nest.")


def test_prompt_without_context_uses_marker():
    prompt = build_prompt("What is a span?", "  ")
    assert NO_CONTEXT_MARKER in prompt
    assert parse_prompt(prompt) == ("What is a span?", "")


def test_estimate_cost_known_model():
    assert estimate_cost("gemini-2.5-flash", 1000, 1000) == pytest.approx(0.000075 + 0.0003)


def test_estimate_cost_unknown_model_uses_flat_rate():
    assert estimate_cost("mock-gemini", 100, 50) == pytest.approx(150 * DEFAULT_RATE_PER_TOKEN)


def test_approx_tokens_minimum():
    assert approx_tokens("") == 1
    assert approx_tokens("x" * 40) == 10


@pytest.mark.asyncio
async def test_mock_generator_echoes_context():
    output = await MockGenerator().generate(build_prompt("What is a span?", "A span is\na timed operation."))
    assert output.text == "What is a span? A span is a timed operation."
    assert output.input_tokens > 0
    assert output.total_tokens == output.input_tokens + output.output_tokens
    assert output.cost_usd > 0


@pytest.mark.asyncio
async def test_mock_generator_without_context():
    output = await MockGenerator().generate(build_prompt("What is a span?", ""))
    assert output.text == "I could not find supporting context for: What is a span?"


def test_gemini_requires_api_key():
    with pytest.raises(ConfigurationError):
        GeminiProvider(api_key="")


def _fake_client(generate_content):
    return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))


@pytest.mark.asyncio
async def test_gemini_reads_usage_metadata():
    async def generate_content(model, contents, config):
        return SimpleNamespace(
            text="Spans are timed operations.",
            usage_metadata=SimpleNamespace(prompt_token_count=1000, candidates_token_count=1000),
        )

    provider = GeminiProvider(api_key="test-key", model="gemini-2.5-flash")
    provider._client = _fake_client(generate_content)
    output = await provider.generate("prompt")

    assert output.text == "Spans are timed operations."
    assert output.input_tokens == 1000
    assert output.cost_usd == pytest.approx(0.000375)


@pytest.mark.asyncio
async def test_gemini_failure_carries_status():
    class ApiFailure(Exception):
        code = 503

    async def generate_content(model, contents, config):
        raise ApiFailure("service unavailable")

    provider = GeminiProvider(api_key="test-key")
    provider._client = _fake_client(generate_content)
    with pytest.raises(GenerationError) as exc_info:
        await provider.generate("prompt")
    assert exc_info.value.status == 503
