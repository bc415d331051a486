"""Ingest pipeline: extract -> chunk -> embed -> insert."""

from __future__ import annotations

import asyncio
import logging

from grounded_qa.errors import ConfigError
from grounded_qa.ingest.chunker import SlidingWindowChunker
from grounded_qa.ingest.embedder import Embedder
from grounded_qa.ingest.parser import ParserRegistry
from grounded_qa.retrieval.store import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "document"


class IngestPipeline:
    """Coordinates parser/chunker/embedder/document store stages.

    Chunks are embedded and inserted one at a time in document order; any
    embedding or store failure aborts the ingest.
    """

    def __init__(
        self,
        parser_registry: ParserRegistry,
        chunker: SlidingWindowChunker,
        embedder: Embedder,
        store: DocumentStore,
    ) -> None:
        self._parser_registry = parser_registry
        self._chunker = chunker
        self._embedder = embedder
        self._store = store

    async def ingest(
        self,
        namespace: str,
        raw: bytes,
        *,
        title: str | None = None,
        filename: str = "",
    ) -> int:
        """Ingest one uploaded document and return the number of chunks stored."""

        if not namespace:
            raise ConfigError("namespace and file required")
        title = title or DEFAULT_TITLE
        parsed = await asyncio.to_thread(
            self._parser_registry.parse_bytes, raw, filename=filename, title=title
        )
        chunks = self._chunker.chunk(parsed.text)

        for chunk in chunks:
            embedding = await self._embedder.embed(chunk.text)
            await self._store.insert_chunk(
                namespace,
                chunk.text,
                {**parsed.metadata, "source": title, "chunk_index": chunk.index},
                embedding,
            )

        logger.info(
            "Ingested %r into namespace %s: %d chunks", title, namespace, len(chunks)
        )
        return len(chunks)
