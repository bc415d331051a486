"""Document store interfaces and the in-memory adapter."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from math import sqrt
from typing import Any, Protocol

from grounded_qa.types import Channel, RetrievalHit


class DocumentStore(Protocol):
    """Namespaced store contract consumed by ingestion and retrieval."""

    async def insert_chunk(
        self,
        namespace: str,
        content: str,
        metadata: dict[str, Any],
        embedding: list[float],
    ) -> str:
        """Persist one chunk and return its id."""

    async def vector_search(
        self, namespace: str, query_vector: list[float], k: int
    ) -> list[RetrievalHit]:
        """Return up to `k` hits ranked by vector similarity."""

    async def keyword_search(
        self, namespace: str, query_text: str, k: int
    ) -> list[RetrievalHit]:
        """Return up to `k` hits ranked by lexical match."""


@dataclass(slots=True)
class _StoredChunk:
    id: str
    content: str
    metadata: dict[str, Any]
    embedding: list[float]


class InMemoryDocumentStore:
    """Process-local store used for tests and local prototyping."""

    def __init__(self) -> None:
        self._namespaces: dict[str, dict[str, _StoredChunk]] = {}

    async def insert_chunk(
        self,
        namespace: str,
        content: str,
        metadata: dict[str, Any],
        embedding: list[float],
    ) -> str:
        chunk_id = str(uuid.uuid4())
        self._namespaces.setdefault(namespace, {})[chunk_id] = _StoredChunk(
            id=chunk_id,
            content=content,
            metadata=dict(metadata),
            embedding=embedding,
        )
        return chunk_id

    async def vector_search(
        self, namespace: str, query_vector: list[float], k: int
    ) -> list[RetrievalHit]:
        ranked = sorted(
            (
                _to_hit(rec, _cosine_similarity(query_vector, rec.embedding), Channel.VECTOR)
                for rec in self._records(namespace)
            ),
            key=lambda hit: hit.score,
            reverse=True,
        )
        return ranked[:k]

    async def keyword_search(
        self, namespace: str, query_text: str, k: int
    ) -> list[RetrievalHit]:
        query_tokens = set(query_text.lower().split())
        scored = []
        for rec in self._records(namespace):
            overlap = len(query_tokens & set(rec.content.lower().split()))
            if overlap == 0:
                continue
            rank = overlap / max(1, len(query_tokens))
            scored.append(_to_hit(rec, rank, Channel.KEYWORD))

        ranked = sorted(scored, key=lambda hit: hit.score, reverse=True)
        return ranked[:k]

    def _records(self, namespace: str) -> list[_StoredChunk]:
        return list(self._namespaces.get(namespace, {}).values())


def _to_hit(record: _StoredChunk, score: float, channel: Channel) -> RetrievalHit:
    return RetrievalHit(
        id=record.id,
        content=record.content,
        meta=dict(record.metadata),
        score=score,
        channel=channel,
    )


def _cosine_similarity(a: list[float], b: list[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    numerator = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = sqrt(sum(x * x for x in a))
    norm_b = sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return numerator / (norm_a * norm_b)
