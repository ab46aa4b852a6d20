"""Qdrant-backed retriever using the REST API over httpx.

Documents are scrolled from the collection and ranked by keyword overlap with
the query. Transport failures are raised as ``RetrievalError`` so the stage
contract can classify them (timeout, provider down).
"""

from __future__ import annotations

import httpx

from traceguard.exceptions import RetrievalError
from traceguard.keyword_search.tokenizer import keyword_score
from traceguard.models.domain import RetrievalOutput
from traceguard.observability.logger import get_logger

logger = get_logger("qdrant_retriever")


class QdrantRetriever:
    def __init__(
        self,
        base_url: str,
        collection: str,
        scroll_limit: int = 100,
        timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._collection = collection
        self._scroll_limit = scroll_limit
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    @property
    def provider(self) -> str:
        return "qdrant"

    async def retrieve(self, query: str, top_k: int = 3) -> RetrievalOutput:
        url = f"{self._base_url}/collections/{self._collection}/points/scroll"
        try:
            resp = await self._client.post(
                url, json={"limit": self._scroll_limit, "with_payload": True}
            )
        except httpx.TimeoutException as e:
            raise RetrievalError(f"Qdrant request timed out: {e}", code="TIMEOUT") from e
        except httpx.HTTPError as e:
            raise RetrievalError(f"Qdrant unreachable: {e}", status=503) from e

        if resp.status_code == 404:
            logger.warning("qdrant_collection_missing", collection=self._collection)
            return RetrievalOutput(context="", docs=0)
        if resp.status_code >= 400:
            raise RetrievalError(
                f"Qdrant scroll failed: {resp.status_code} {resp.text[:200]}",
                status=resp.status_code,
            )

        points = resp.json().get("result", {}).get("points", [])
        scored = []
        for point in points:
            payload = point.get("payload") or {}
            text = payload.get("text", "")
            score = keyword_score(query, text)
            if score > 0:
                scored.append((score, text, payload.get("source")))
        scored.sort(key=lambda s: -s[0])
        top = scored[:top_k]

        logger.info("qdrant_retrieval", scanned=len(points), hits=len(top))
        return RetrievalOutput(
            context="\n\n".join(text for _, text, _ in top),
            docs=len(top),
            sources=[source for _, _, source in top if source],
        )

    async def aclose(self) -> None:
        await self._client.aclose()
