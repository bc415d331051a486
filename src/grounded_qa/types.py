"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Channel(str, Enum):
    """Retrieval channel a hit came from."""

    VECTOR = "vector"
    KEYWORD = "keyword"


class AgentName(str, Enum):
    """Retrieval domains the router may select."""

    PDF = "pdf"
    LAW = "law"
    FACTCHECK = "factcheck"


class MemoryRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(slots=True)
class ParsedDocument:
    """Extracted document text before chunking."""

    title: str
    text: str
    metadata: dict[str, Any]


@dataclass(frozen=True, slots=True)
class Chunk:
    """A contiguous window of a source document."""

    text: str
    index: int


@dataclass(slots=True)
class RetrievalHit:
    """One candidate from one retrieval channel.

    Scores are channel-local: cosine similarity for vector hits, lexical rank
    for keyword hits. After fusion the surviving hit is used as-is.
    """

    id: str
    content: str
    meta: dict[str, Any]
    score: float
    channel: Channel


@dataclass(frozen=True, slots=True)
class RouteDecision:
    """Agents selected for a question; consumers only test membership."""

    agents: frozenset[AgentName]

    def __contains__(self, agent: object) -> bool:
        return agent in self.agents

    @classmethod
    def all_agents(cls) -> "RouteDecision":
        return cls(agents=frozenset(AgentName))


@dataclass(slots=True)
class MemoryEntry:
    role: MemoryRole
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(slots=True)
class AnswerResult:
    """Final pipeline output with the context it was grounded on."""

    text: str
    used_context: list[RetrievalHit]
    route: RouteDecision | None = None
    verified: bool = False
    final_answer: str = ""
