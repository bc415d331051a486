import asyncio

from grounded_qa.config import ChunkingConfig
from grounded_qa.ingest.chunker import SlidingWindowChunker
from grounded_qa.ingest.embedder import HashingEmbedder
from grounded_qa.ingest.parser import ParserRegistry
from grounded_qa.ingest.pipeline import IngestPipeline
from grounded_qa.retrieval.store import InMemoryDocumentStore

PAGE_TEXT = "Employees must encrypt customer data at rest"


def _one_page_pdf(text: str) -> bytes:
    content = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_offset = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_offset,
    )
    return bytes(out)


def test_pdf_upload_is_parsed_by_extension() -> None:
    parsed = ParserRegistry().parse_bytes(
        _one_page_pdf(PAGE_TEXT), filename="Handbook.PDF", title="Handbook"
    )

    assert PAGE_TEXT in parsed.text
    assert parsed.metadata == {"source": "Handbook", "format": "pdf", "pages": 1}


def test_unknown_extension_falls_back_to_text() -> None:
    parsed = ParserRegistry().parse_bytes(b"plain words", filename="notes.rtf", title="Notes")

    assert parsed.text == "plain words"
    assert parsed.metadata["format"] == "text"


def test_ingested_pdf_chunks_carry_document_metadata() -> None:
    store = InMemoryDocumentStore()
    ingest = IngestPipeline(
        ParserRegistry(),
        SlidingWindowChunker(ChunkingConfig()),
        HashingEmbedder(),
        store,
    )

    async def _scenario():
        count = await ingest.ingest(
            "policy", _one_page_pdf(PAGE_TEXT), title="Handbook", filename="handbook.pdf"
        )
        hits = await store.keyword_search("policy", "encrypt customer data", 8)
        return count, hits

    count, hits = asyncio.run(_scenario())

    assert count == 1
    (hit,) = hits
    assert PAGE_TEXT in hit.content
    assert hit.meta == {"source": "Handbook", "format": "pdf", "pages": 1, "chunk_index": 0}
