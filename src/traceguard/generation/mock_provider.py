"""Deterministic offline generator for demos and tests.

Produces an extractive answer: the question followed by the retrieved context.
Without context it admits it found nothing. No network, no randomness.
"""

from __future__ import annotations

from traceguard.generation.pricing import estimate_cost
from traceguard.generation.prompt_templates import parse_prompt
from traceguard.models.domain import GenerationOutput
from traceguard.observability.logger import get_logger

logger = get_logger("mock_generator")

MOCK_MODEL = "mock-gemini"


def approx_tokens(text: str) -> int:
    """Rough token estimate: about four characters per token."""
    return max(1, len(text) // 4)


class MockGenerator:
    def __init__(self, model: str = MOCK_MODEL) -> None:
        self._model = model

    @property
    def provider(self) -> str:
        return "mock"

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, prompt: str) -> GenerationOutput:
        query, context = parse_prompt(prompt)
        if context:
            text = f"{query} {' '.join(context.split())}"
        else:
            text = f"I could not find supporting context for: {query}"

        input_tokens = approx_tokens(prompt)
        output_tokens = approx_tokens(text)
        logger.debug("mock_generated", answer_len=len(text))
        return GenerationOutput(
            text=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=estimate_cost(self._model, input_tokens, output_tokens),
        )
