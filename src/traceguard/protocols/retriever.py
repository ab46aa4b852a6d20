"""Protocol for retrieval providers."""

from __future__ import annotations

from typing import Protocol

from traceguard.models.domain import RetrievalOutput


class Retriever(Protocol):
    @property
    def provider(self) -> str: ...

    async def retrieve(self, query: str, top_k: int = 3) -> RetrievalOutput: ...
