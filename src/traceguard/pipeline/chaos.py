"""Per-request failure injection, applied by wrapping the stage collaborators."""

from __future__ import annotations

from traceguard.exceptions import ToolError
from traceguard.generation.pricing import estimate_cost
from traceguard.models.domain import GenerationOutput, RetrievalOutput, ToolOutput
from traceguard.models.schemas import ChaosFlags
from traceguard.protocols.llm import Generator
from traceguard.protocols.retriever import Retriever
from traceguard.protocols.tool import Tool

SPIKE_INPUT_TOKENS = 3500
SPIKE_OUTPUT_TOKENS = 1200

# Trips the card-number, email and credential patterns of the evaluator.
POLICY_RISK_SNIPPET = (
    "For account help contact admin@example.com with card 4111 1111 1111 1111 "
    "and password = hunter2."
)


class EmptyRetriever:
    def __init__(self, inner: Retriever) -> None:
        self._inner = inner

    @property
    def provider(self) -> str:
        return self._inner.provider

    async def retrieve(self, query: str, top_k: int = 3) -> RetrievalOutput:
        return RetrievalOutput(context="", docs=0)


class BrokenTool:
    def __init__(self, inner: Tool) -> None:
        self._inner = inner

    @property
    def name(self) -> str:
        return self._inner.name

    @property
    def timeout_ms(self) -> int:
        return self._inner.timeout_ms

    async def invoke(self) -> ToolOutput:
        raise ToolError("Tool timeout", code="TOOL_TIMEOUT")


class ChaosGenerator:
    def __init__(self, inner: Generator, policy_risk: bool, token_spike: bool) -> None:
        self._inner = inner
        self._policy_risk = policy_risk
        self._token_spike = token_spike

    @property
    def provider(self) -> str:
        return self._inner.provider

    @property
    def model(self) -> str:
        return self._inner.model

    async def generate(self, prompt: str) -> GenerationOutput:
        output = await self._inner.generate(prompt)
        text = output.text
        input_tokens, output_tokens, cost = output.input_tokens, output.output_tokens, output.cost_usd
        if self._policy_risk:
            text = f"{text} {POLICY_RISK_SNIPPET}"
        if self._token_spike:
            input_tokens = max(input_tokens, SPIKE_INPUT_TOKENS)
            output_tokens = max(output_tokens, SPIKE_OUTPUT_TOKENS)
            cost = max(cost, estimate_cost(self.model, input_tokens, output_tokens))
        return GenerationOutput(
            text=text, input_tokens=input_tokens, output_tokens=output_tokens, cost_usd=cost
        )


def apply_chaos(
    flags: ChaosFlags, retriever: Retriever, tool: Tool, generator: Generator
) -> tuple[Retriever, Tool, Generator]:
    """Wrap collaborators according to the request's chaos flags."""
    if flags.bad_retrieval:
        retriever = EmptyRetriever(retriever)
    if flags.break_tool:
        tool = BrokenTool(tool)
    if flags.policy_risk or flags.token_spike:
        generator = ChaosGenerator(generator, flags.policy_risk, flags.token_spike)
    return retriever, tool, generator
