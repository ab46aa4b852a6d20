"""Google Gemini generation provider using the google-genai SDK."""

from __future__ import annotations

from google import genai
from google.genai import types

from traceguard.exceptions import ConfigurationError, GenerationError
from traceguard.generation.pricing import estimate_cost
from traceguard.models.domain import GenerationOutput
from traceguard.observability.logger import get_logger

logger = get_logger("gemini")


class GeminiProvider:
    """Single-attempt Gemini client; retries belong to the caller, not here."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> None:
        if not api_key:
            raise ConfigurationError("TRACEGUARD_GOOGLE_API_KEY is required for the gemini provider")
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def provider(self) -> str:
        return "gemini"

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, prompt: str) -> GenerationOutput:
        config = types.GenerateContentConfig(
            temperature=self._temperature,
            max_output_tokens=self._max_tokens,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=config,
            )
        except Exception as e:
            status = getattr(e, "code", None)
            raise GenerationError(
                f"Gemini generation failed: {e}",
                status=status if isinstance(status, int) else None,
            ) from e

        usage = response.usage_metadata
        if usage is None:
            raise GenerationError("Gemini response missing usage metadata")

        input_tokens = usage.prompt_token_count or 0
        output_tokens = usage.candidates_token_count or 0
        text = response.text or ""

        logger.info(
            "gemini_generated",
            model=self._model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
        return GenerationOutput(
            text=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=estimate_cost(self._model, input_tokens, output_tokens),
        )
