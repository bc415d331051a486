"""Chat-completion service contract and the LangChain OpenAI adapter."""

from __future__ import annotations

from typing import Any, Protocol

from langchain_core.messages import HumanMessage, SystemMessage

from grounded_qa.errors import CollaboratorUnavailableError


class ChatService(Protocol):
    """Text-in/text-out generation service."""

    async def complete(
        self, system_prompt: str, user_prompt: str, temperature: float
    ) -> str:
        """Return the model's textual reply."""


class LangChainChatService:
    """`ChatService` backed by a LangChain chat model.

    Temperature is bound per call so one model instance serves the router,
    the generator and the verifier.
    """

    def __init__(self, llm: Any) -> None:
        self.llm = llm

    async def complete(
        self, system_prompt: str, user_prompt: str, temperature: float
    ) -> str:
        model = self.llm.bind(temperature=temperature)
        try:
            response = await model.ainvoke(
                [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
            )
        except Exception as exc:
            raise CollaboratorUnavailableError("generation", str(exc)) from exc
        return _message_text(response)


def create_openai_chat_service(model: str, api_key: str) -> LangChainChatService:
    from langchain_openai import ChatOpenAI

    return LangChainChatService(ChatOpenAI(model=model, api_key=api_key, temperature=0))


def _message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    return str(content)
