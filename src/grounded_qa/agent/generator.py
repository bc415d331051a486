"""Grounded answer generation."""

from __future__ import annotations

from collections.abc import Sequence

from grounded_qa.llm import ChatService
from grounded_qa.types import RetrievalHit

_SYSTEM_PROMPT = """
You are an HR and employment-law assistant for a company.

Rules:
1) Answer only from the numbered context excerpts supplied with the question.
2) Do not assert anything the context does not support; decline instead.
3) Cite the excerpts you used inline with their numbers in brackets, e.g. [1].
4) If the context is empty or irrelevant, say that no grounding evidence was found.
5) Answer in {language}.
""".strip()


def render_context(context: Sequence[RetrievalHit]) -> str:
    """Render excerpts as `#<n>` blocks, numbered from 1 in order."""
    return "\n\n".join(f"#{i}\n{hit.content}" for i, hit in enumerate(context, start=1))


class AnswerGenerator:
    """Produces the draft answer from the packed context of all agents."""

    def __init__(
        self,
        chat: ChatService,
        *,
        temperature: float = 0.2,
        language: str = "Korean",
    ) -> None:
        self.chat = chat
        self.temperature = temperature
        self.system_prompt = _SYSTEM_PROMPT.format(language=language)

    async def generate(self, question: str, context: Sequence[RetrievalHit]) -> str:
        user_prompt = (
            f"Question:\n{question}\n\n"
            f"Context:\n{render_context(context)}\n\n"
            "Requirements: concise, step by step, use a list where helpful."
        )
        return await self.chat.complete(self.system_prompt, user_prompt, self.temperature)
