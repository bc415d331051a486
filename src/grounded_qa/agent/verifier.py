"""Fact-check pass over a drafted answer."""

from __future__ import annotations

from collections.abc import Sequence

from grounded_qa.agent.generator import render_context
from grounded_qa.llm import ChatService
from grounded_qa.types import RetrievalHit

_SYSTEM_PROMPT = """
You are a fact checker. Check whether the draft answer contradicts the context.
If it does, return a corrected answer of at most one paragraph; otherwise return
the draft unchanged. When the context does not settle a point, say it is
uncertain instead of guessing. Answer in {language}.
""".strip()


class FactCheckVerifier:
    """Cross-checks a draft against the same context used to write it."""

    def __init__(
        self,
        chat: ChatService,
        *,
        temperature: float = 0.0,
        language: str = "Korean",
    ) -> None:
        self.chat = chat
        self.temperature = temperature
        self.system_prompt = _SYSTEM_PROMPT.format(language=language)

    async def verify(
        self, question: str, draft: str, context: Sequence[RetrievalHit]
    ) -> str:
        user_prompt = (
            f"Question:\n{question}\n\n"
            f"Draft:\n{draft}\n\n"
            f"Context:\n{render_context(context)}\n\n"
            "Output only the final verified answer."
        )
        return await self.chat.complete(self.system_prompt, user_prompt, self.temperature)
