"""Tool backed by an HTTP GET endpoint."""

from __future__ import annotations

import httpx

from traceguard.exceptions import ToolError
from traceguard.models.domain import ToolOutput
from traceguard.observability.logger import get_logger

logger = get_logger("http_tool")


class HttpTool:
    def __init__(
        self,
        name: str,
        url: str,
        timeout_ms: int = 2000,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._name = name
        self._url = url
        self._timeout_ms = timeout_ms
        self._client = client or httpx.AsyncClient(timeout=timeout_ms / 1000)

    @property
    def name(self) -> str:
        return self._name

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    async def invoke(self) -> ToolOutput:
        try:
            resp = await self._client.get(self._url)
        except httpx.TimeoutException as e:
            raise ToolError(f"Tool {self._name} timed out", code="TOOL_TIMEOUT") from e
        except httpx.HTTPError as e:
            raise ToolError(f"Tool {self._name} unreachable: {e}", status=503) from e

        if resp.status_code >= 400:
            raise ToolError(
                f"Tool {self._name} returned {resp.status_code}", status=resp.status_code
            )
        logger.info("tool_invoked", tool=self._name, status=resp.status_code)
        return ToolOutput(result=resp.text[:1000])

    async def aclose(self) -> None:
        await self._client.aclose()
