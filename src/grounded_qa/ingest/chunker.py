"""Fixed-size sliding-window chunking."""

from __future__ import annotations

from grounded_qa.config import ChunkingConfig
from grounded_qa.errors import InvalidConfigError
from grounded_qa.types import Chunk


def chunk_text(text: str, size: int = 1200, overlap: int = 200) -> list[Chunk]:
    """Split `text` into character windows of `size` sharing `overlap` characters.

    Each window after the first starts at `previous_end - overlap` (clamped to
    zero). The loop stops once a window reaches the end of the text, so every
    chunk except the last is exactly `size` characters long.

    Raises:
        InvalidConfigError: if `size < 1` or `overlap` is not in `[0, size)`.
    """

    _validate(size, overlap)
    if not text:
        return []

    chunks: list[Chunk] = []
    start = 0
    while start < len(text):
        end = min(start + size, len(text))
        chunks.append(Chunk(text=text[start:end], index=len(chunks)))
        if end == len(text):
            break
        start = max(end - overlap, 0)
    return chunks


def _validate(size: int, overlap: int) -> None:
    if size < 1:
        raise InvalidConfigError(f"chunk size must be positive, got {size}")
    if overlap < 0:
        raise InvalidConfigError(f"chunk overlap must not be negative, got {overlap}")
    if overlap >= size:
        raise InvalidConfigError(
            f"chunk overlap ({overlap}) must be less than chunk size ({size})"
        )


class SlidingWindowChunker:
    """Chunker bound to a validated `ChunkingConfig`."""

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        self.config = config or ChunkingConfig()
        _validate(self.config.size, self.config.overlap)

    def chunk(self, text: str) -> list[Chunk]:
        return chunk_text(text, self.config.size, self.config.overlap)
