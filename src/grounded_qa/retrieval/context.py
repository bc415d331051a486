"""Character-budgeted context packing."""

from __future__ import annotations

from collections.abc import Sequence

from grounded_qa.types import RetrievalHit

DEFAULT_MAX_CHARS = 8000


def pack_context(
    results: Sequence[RetrievalHit], max_chars: int = DEFAULT_MAX_CHARS
) -> list[RetrievalHit]:
    """Return the longest prefix of `results` whose content fits in `max_chars`.

    Items are never split; packing stops at the first item that would exceed
    the budget, even if a later, shorter item would still fit.
    """

    used = 0
    keep: list[RetrievalHit] = []
    for result in results:
        if used + len(result.content) > max_chars:
            break
        keep.append(result)
        used += len(result.content)
    return keep
