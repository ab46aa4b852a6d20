"""Per-model token pricing used to estimate generation cost."""

from __future__ import annotations

# USD per 1K tokens: (input, output)
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "gemini-2.5-flash": (0.000075, 0.0003),
    "gemini-2.5-pro": (0.00125, 0.005),
    "gemini-2.0-flash": (0.000075, 0.0003),
    "gemini-2.0-flash-001": (0.000075, 0.0003),
    "gemini-flash-latest": (0.000075, 0.0003),
    "gemini-pro-latest": (0.00125, 0.005),
    "gemini-1.5-flash": (0.000075, 0.0003),
    "gemini-1.5-pro": (0.00125, 0.005),
}

# Flat rate for models without a pricing entry (mock and unknown models)
DEFAULT_RATE_PER_TOKEN = 0.000001


def estimate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    pricing = MODEL_PRICING.get(model)
    if pricing is None:
        return (input_tokens + output_tokens) * DEFAULT_RATE_PER_TOKEN
    input_rate, output_rate = pricing
    return input_tokens * input_rate / 1000 + output_tokens * output_rate / 1000
