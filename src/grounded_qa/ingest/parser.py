"""Raw document bytes to text, selected by file extension."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from pathlib import Path

from pypdf import PdfReader

from grounded_qa.types import ParsedDocument


class Parser(ABC):
    """Base parser interface used by the ingest pipeline."""

    extensions: tuple[str, ...] = ()

    @abstractmethod
    def parse(self, raw: bytes, *, title: str) -> ParsedDocument:
        """Extract text + metadata from raw upload bytes."""


class TextParser(Parser):
    """Parser for plain text and markdown uploads."""

    extensions = (".txt", ".md", ".markdown", ".log")

    def parse(self, raw: bytes, *, title: str) -> ParsedDocument:
        return ParsedDocument(
            title=title,
            text=raw.decode("utf-8", errors="replace"),
            metadata={"source": title, "format": "text"},
        )


class PdfParser(Parser):
    """Parser for PDF uploads; pages are joined with newlines."""

    extensions = (".pdf",)

    def parse(self, raw: bytes, *, title: str) -> ParsedDocument:
        reader = PdfReader(io.BytesIO(raw))
        text = "\n".join(page.extract_text() or "" for page in reader.pages)
        return ParsedDocument(
            title=title,
            text=text,
            metadata={"source": title, "format": "pdf", "pages": len(reader.pages)},
        )


class ParserRegistry:
    """Maps file extension to parser implementation.

    Unknown or missing extensions fall back to the text parser.
    """

    def __init__(self, parsers: list[Parser] | None = None) -> None:
        self._parsers: dict[str, Parser] = {}
        self._default: Parser = TextParser()
        for parser in parsers or [self._default, PdfParser()]:
            self.register(parser)

    def register(self, parser: Parser) -> None:
        for extension in parser.extensions:
            self._parsers[extension.lower()] = parser

    def parse_bytes(self, raw: bytes, *, filename: str, title: str) -> ParsedDocument:
        suffix = Path(filename).suffix.lower() if filename else ""
        parser = self._parsers.get(suffix, self._default)
        return parser.parse(raw, title=title)
