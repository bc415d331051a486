from grounded_qa.agent.citations import build_citations
from grounded_qa.types import Channel, RetrievalHit


def _hit(meta: dict) -> RetrievalHit:
    return RetrievalHit(id="id", content="", meta=meta, score=0.0, channel=Channel.VECTOR)


def test_citations_with_placeholder_label() -> None:
    results = [_hit({"source": "A", "page": 2}), _hit({})]

    assert build_citations(results) == "[1]A:2 [2]document:0"


def test_title_and_chunk_index_fallbacks() -> None:
    results = [_hit({"title": "Handbook", "chunk_index": 4}), _hit({"source": "", "page": 0})]

    assert build_citations(results) == "[1]Handbook:4 [2]document:0"


def test_no_results_yields_empty_string() -> None:
    assert build_citations([]) == ""
