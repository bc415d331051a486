"""Human-readable source list for an answer."""

from __future__ import annotations

from collections.abc import Sequence

from grounded_qa.types import RetrievalHit

PLACEHOLDER_LABEL = "document"


def build_citations(results: Sequence[RetrievalHit]) -> str:
    """Render `[i]<source>:<page>` entries, 1-indexed, separated by spaces.

    The label prefers `source`, then `title`, then the placeholder; the
    location prefers `page`, then `chunk_index`, then 0.
    """

    return " ".join(
        f"[{i}]{_label(hit)}:{_location(hit)}" for i, hit in enumerate(results, start=1)
    )


def _label(hit: RetrievalHit) -> str:
    return str(hit.meta.get("source") or hit.meta.get("title") or PLACEHOLDER_LABEL)


def _location(hit: RetrievalHit) -> object:
    return hit.meta.get("page") or hit.meta.get("chunk_index") or 0
