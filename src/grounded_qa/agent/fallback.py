"""Deterministic pipeline components used when no LLM is configured."""

from __future__ import annotations

from collections.abc import Sequence

from grounded_qa.types import AgentName, RetrievalHit, RouteDecision

NO_EVIDENCE_ANSWER = "No verifiable evidence was found in the indexed documents."


class StaticRouter:
    """Router that always consults the retrieval agents and skips fact-checking.

    Keeps the `AgentRouter.route` contract for offline/local environments where
    `OPENAI_API_KEY` is not configured.
    """

    def __init__(self, agents: frozenset[AgentName] | None = None) -> None:
        self.decision = RouteDecision(
            agents=agents if agents is not None else frozenset({AgentName.PDF, AgentName.LAW})
        )

    async def route(self, question: str) -> RouteDecision:
        del question  # static routing ignores the question.
        return self.decision


class ExtractiveGenerator:
    """Answers by quoting the top excerpts with their context numbers."""

    def __init__(self, max_excerpts: int = 3, max_excerpt_chars: int = 220) -> None:
        self.max_excerpts = max_excerpts
        self.max_excerpt_chars = max_excerpt_chars

    async def generate(self, question: str, context: Sequence[RetrievalHit]) -> str:
        del question
        if not context:
            return NO_EVIDENCE_ANSWER

        lines: list[str] = []
        for idx, hit in enumerate(context[: self.max_excerpts], start=1):
            snippet = _truncate(" ".join(hit.content.split()), self.max_excerpt_chars)
            lines.append(f"{idx}. {snippet} [{idx}]")
        return "\n".join(lines)


class PassthroughVerifier:
    """Verifier that accepts the draft as-is."""

    async def verify(
        self, question: str, draft: str, context: Sequence[RetrievalHit]
    ) -> str:
        del question, context
        return draft


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
