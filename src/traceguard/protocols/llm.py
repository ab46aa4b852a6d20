"""Protocol for text-generation providers."""

from __future__ import annotations

from typing import Protocol

from traceguard.models.domain import GenerationOutput


class Generator(Protocol):
    @property
    def provider(self) -> str: ...

    @property
    def model(self) -> str: ...

    async def generate(self, prompt: str) -> GenerationOutput: ...
