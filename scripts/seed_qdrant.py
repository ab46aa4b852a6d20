"""Seed a Qdrant collection with the demo documents for development."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import httpx

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from traceguard.config.settings import Settings
from traceguard.observability.logger import get_logger, setup_logging
from traceguard.retrieval.seed_docs import DEMO_DOCUMENTS

logger = get_logger("seed_qdrant")

# Retrieval ranks payload text by keywords, so the vector is only a placeholder.
PLACEHOLDER_VECTOR = [1.0]


async def main() -> None:
    settings = Settings()
    setup_logging(settings.log_level, json_output=False)
    base = f"{settings.qdrant_url.rstrip('/')}/collections/{settings.qdrant_collection}"

    async with httpx.AsyncClient(timeout=settings.qdrant_timeout_s) as client:
        resp = await client.get(base)
        if resp.status_code == 404:
            resp = await client.put(
                base, json={"vectors": {"size": len(PLACEHOLDER_VECTOR), "distance": "Dot"}}
            )
            resp.raise_for_status()
            logger.info("collection_created", collection=settings.qdrant_collection)
        else:
            resp.raise_for_status()

        points = [
            {
                "id": i + 1,
                "vector": PLACEHOLDER_VECTOR,
                "payload": {"doc_id": doc.id, "text": doc.text, "source": doc.source},
            }
            for i, doc in enumerate(DEMO_DOCUMENTS)
        ]
        resp = await client.put(f"{base}/points", params={"wait": "true"}, json={"points": points})
        resp.raise_for_status()

    logger.info("seed_complete", collection=settings.qdrant_collection, points=len(points))


if __name__ == "__main__":
    asyncio.run(main())
