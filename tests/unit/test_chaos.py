"""Tests for per-request failure injection."""

import pytest

from traceguard.evaluation.evaluator import policy_matches
from traceguard.exceptions import ToolError
from traceguard.generation.mock_provider import MockGenerator
from traceguard.models.schemas import ChaosFlags
from traceguard.pipeline.chaos import (
    SPIKE_INPUT_TOKENS,
    SPIKE_OUTPUT_TOKENS,
    BrokenTool,
    ChaosGenerator,
    EmptyRetriever,
    apply_chaos,
)
from traceguard.retrieval.memory_retriever import InMemoryRetriever
from traceguard.tools.static_tool import StaticTool


def test_no_flags_leaves_collaborators_untouched():
    retriever, tool, generator = InMemoryRetriever(), StaticTool(), MockGenerator()
    assert apply_chaos(ChaosFlags(), retriever, tool, generator) == (retriever, tool, generator)


def test_flags_wrap_collaborators():
    flags = ChaosFlags(break_tool=True, bad_retrieval=True, policy_risk=True)
    retriever, tool, generator = apply_chaos(flags, InMemoryRetriever(), StaticTool(), MockGenerator())
    assert isinstance(retriever, EmptyRetriever)
    assert isinstance(tool, BrokenTool)
    assert isinstance(generator, ChaosGenerator)
    # Wrappers keep the identity used in span attributes.
    assert retriever.provider == "memory"
    assert tool.name == "mock.weather"
    assert generator.model == "mock-gemini"


@pytest.mark.asyncio
async def test_empty_retriever_returns_nothing():
    output = await EmptyRetriever(InMemoryRetriever()).retrieve("What is observability?")
    assert output.context == ""
    assert output.docs == 0


@pytest.mark.asyncio
async def test_broken_tool_raises_timeout():
    with pytest.raises(ToolError) as exc_info:
        await BrokenTool(StaticTool()).invoke()
    assert exc_info.value.code == "TOOL_TIMEOUT"


@pytest.mark.asyncio
async def test_policy_risk_snippet_trips_three_patterns():
    generator = ChaosGenerator(MockGenerator(), policy_risk=True, token_spike=False)
    output = await generator.generate("Question: hi\n\nContext:\nsome text\n\nAnswer:")
    assert {"credit_card", "email", "credential_assignment"} <= set(policy_matches(output.text))


@pytest.mark.asyncio
async def test_token_spike_inflates_usage_and_cost():
    inner = MockGenerator()
    prompt = "Question: hi\n\nContext:\nsome text\n\nAnswer:"
    baseline = await inner.generate(prompt)
    spiked = await ChaosGenerator(inner, policy_risk=False, token_spike=True).generate(prompt)
    assert spiked.input_tokens == SPIKE_INPUT_TOKENS
    assert spiked.output_tokens == SPIKE_OUTPUT_TOKENS
    assert spiked.cost_usd > baseline.cost_usd
    assert spiked.text == baseline.text
