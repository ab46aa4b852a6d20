"""Protocol for tools invoked during the tool stage."""

from __future__ import annotations

from typing import Protocol

from traceguard.models.domain import ToolOutput


class Tool(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def timeout_ms(self) -> int: ...

    async def invoke(self) -> ToolOutput: ...
