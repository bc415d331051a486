import pytest

from grounded_qa.config import ChunkingConfig
from grounded_qa.errors import ConfigError, InvalidConfigError
from grounded_qa.ingest.chunker import SlidingWindowChunker, chunk_text


def _make_text(length: int) -> str:
    alphabet = "abcdefghijklmnopqrstuvwxyz0123456789 "
    return "".join(alphabet[i % len(alphabet)] for i in range(length))


def _reassemble(chunks, overlap: int) -> str:
    if not chunks:
        return ""
    return chunks[0].text + "".join(chunk.text[overlap:] for chunk in chunks[1:])


def test_empty_text_yields_no_chunks() -> None:
    assert chunk_text("", 1200, 200) == []


def test_three_thousand_chars_yield_three_chunks() -> None:
    text = _make_text(3000)

    chunks = chunk_text(text, 1200, 200)

    assert len(chunks) == 3
    assert [chunk.index for chunk in chunks] == [0, 1, 2]
    assert chunks[1].text == text[1000:2200]
    assert chunks[2].text == text[2000:3000]


@pytest.mark.parametrize(
    ("length", "size", "overlap"),
    [(1, 5, 0), (17, 5, 2), (100, 10, 9), (1201, 1200, 200), (2500, 300, 0)],
)
def test_windows_cover_text_with_exact_overlap(length: int, size: int, overlap: int) -> None:
    text = _make_text(length)

    chunks = chunk_text(text, size, overlap)

    assert _reassemble(chunks, overlap) == text
    assert all(len(chunk.text) == size for chunk in chunks[:-1])
    assert 0 < len(chunks[-1].text) <= size
    for previous, current in zip(chunks, chunks[1:]):
        if overlap:
            assert previous.text[-overlap:] == current.text[:overlap]


def test_text_shorter_than_window_is_single_chunk() -> None:
    chunks = chunk_text("short text", 1200, 200)

    assert len(chunks) == 1
    assert chunks[0].text == "short text"


def test_chunking_is_deterministic() -> None:
    text = _make_text(5000)
    assert chunk_text(text, 700, 50) == chunk_text(text, 700, 50)


@pytest.mark.parametrize(("size", "overlap"), [(200, 200), (200, 300), (0, 0), (10, -1)])
def test_invalid_window_configuration_rejected(size: int, overlap: int) -> None:
    with pytest.raises(InvalidConfigError):
        chunk_text("anything", size, overlap)


def test_chunker_validates_config_on_construction() -> None:
    with pytest.raises(ConfigError):
        SlidingWindowChunker(ChunkingConfig(size=100, overlap=100))


def test_default_chunker_uses_original_window() -> None:
    chunker = SlidingWindowChunker()

    chunks = chunker.chunk(_make_text(3000))

    assert [len(chunk.text) for chunk in chunks] == [1200, 1200, 1000]
