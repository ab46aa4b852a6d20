"""In-process tool returning a fixed result."""

from __future__ import annotations

from traceguard.models.domain import ToolOutput


class StaticTool:
    def __init__(self, name: str = "mock.weather", result: str = "tool-ok", timeout_ms: int = 2000) -> None:
        self._name = name
        self._result = result
        self._timeout_ms = timeout_ms

    @property
    def name(self) -> str:
        return self._name

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    async def invoke(self) -> ToolOutput:
        return ToolOutput(result=self._result)
