"""Merging of vector and keyword retrieval channels."""

from __future__ import annotations

from collections.abc import Sequence

from grounded_qa.types import RetrievalHit

DEFAULT_FUSION_LIMIT = 8


def fuse(
    vector_hits: Sequence[RetrievalHit] | None,
    keyword_hits: Sequence[RetrievalHit] | None,
    limit: int = DEFAULT_FUSION_LIMIT,
) -> list[RetrievalHit]:
    """Deduplicate both channels by id and return the best `limit` hits.

    Fusion rules:
    1. Vector hits are visited before keyword hits.
    2. For a repeated id the hit with the strictly greater score wins; on a
       tie the first one seen (the vector hit) is kept.
    3. Survivors are sorted by descending score and truncated to `limit`.

    Scores are compared raw. Vector similarity and lexical rank live on
    different scales, so a keyword rank of 5 outranks a similarity of 0.9.
    A channel that failed upstream is passed as `None` or empty.
    """

    merged: dict[str, RetrievalHit] = {}
    for hit in [*(vector_hits or ()), *(keyword_hits or ())]:
        current = merged.get(hit.id)
        if current is None or hit.score > current.score:
            merged[hit.id] = hit

    # sorted() is stable, so equal scores keep first-seen order.
    ranked = sorted(merged.values(), key=lambda hit: hit.score, reverse=True)
    return ranked[: max(limit, 0)]
