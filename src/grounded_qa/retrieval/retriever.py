"""Hybrid retriever: vector + keyword channels per namespace."""

from __future__ import annotations

import asyncio
import logging

from grounded_qa.config import RetrievalConfig
from grounded_qa.ingest.embedder import Embedder
from grounded_qa.retrieval.context import pack_context
from grounded_qa.retrieval.fusion import fuse
from grounded_qa.retrieval.store import DocumentStore
from grounded_qa.types import RetrievalHit

logger = logging.getLogger(__name__)


class HybridRetriever:
    """Queries both channels of one namespace and packs the fused result.

    Each channel fails independently. A failed embedding or vector query
    leaves the keyword channel alone and vice versa, so a request only loses
    the broken channel's candidates.
    """

    def __init__(
        self,
        store: DocumentStore,
        embedder: Embedder,
        config: RetrievalConfig | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.config = config or RetrievalConfig()

    async def retrieve(self, namespace: str, query: str) -> list[RetrievalHit]:
        vector_hits, keyword_hits = await asyncio.gather(
            self._vector_channel(namespace, query),
            self._keyword_channel(namespace, query),
        )
        merged = fuse(vector_hits, keyword_hits, limit=self.config.fusion_limit)
        packed = pack_context(merged, self.config.max_context_chars)
        logger.debug(
            "Namespace %s: %d vector, %d keyword, %d merged, %d packed",
            namespace,
            len(vector_hits),
            len(keyword_hits),
            len(merged),
            len(packed),
        )
        return packed

    async def _vector_channel(self, namespace: str, query: str) -> list[RetrievalHit]:
        try:
            query_vector = await self.embedder.embed(query)
            return await self.store.vector_search(namespace, query_vector, self.config.vector_k)
        except Exception as exc:
            logger.warning("Vector channel unavailable for %s: %s", namespace, exc)
            return []

    async def _keyword_channel(self, namespace: str, query: str) -> list[RetrievalHit]:
        try:
            return await self.store.keyword_search(namespace, query, self.config.keyword_k)
        except Exception as exc:
            logger.warning("Keyword channel unavailable for %s: %s", namespace, exc)
            return []
