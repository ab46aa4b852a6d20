"""In-process keyword retriever over a fixed document set."""

from __future__ import annotations

from traceguard.keyword_search.tokenizer import keyword_score
from traceguard.models.domain import RetrievalOutput
from traceguard.observability.logger import get_logger
from traceguard.retrieval.seed_docs import DEMO_DOCUMENTS, SeedDocument

logger = get_logger("memory_retriever")


class InMemoryRetriever:
    def __init__(self, documents: list[SeedDocument] | None = None) -> None:
        self._documents = list(DEMO_DOCUMENTS if documents is None else documents)

    @property
    def provider(self) -> str:
        return "memory"

    async def retrieve(self, query: str, top_k: int = 3) -> RetrievalOutput:
        scored = [(keyword_score(query, doc.text), doc) for doc in self._documents]
        # Stable sort keeps document order for equal scores
        ranked = sorted((s for s in scored if s[0] > 0), key=lambda s: -s[0])[:top_k]

        logger.info("memory_retrieval", query_len=len(query), hits=len(ranked))
        return RetrievalOutput(
            context="\n\n".join(doc.text for _, doc in ranked),
            docs=len(ranked),
            sources=[doc.source for _, doc in ranked],
        )
