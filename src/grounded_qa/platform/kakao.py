"""Kakao i Open Builder skill adapter."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from grounded_qa.types import AnswerResult

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "오류가 발생했습니다. 잠시 후 다시 시도해 주세요."
DEFAULT_USER_ID = "kakao"
SKILL_VERSION = "2.0"


class KakaoUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = DEFAULT_USER_ID


class KakaoUserRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    utterance: str = ""
    user: KakaoUser = Field(default_factory=KakaoUser)


class KakaoSkillRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    userRequest: KakaoUserRequest = Field(default_factory=KakaoUserRequest)


class _Asker(Protocol):
    async def ask(self, question: str, user_id: str) -> AnswerResult: ...


def simple_text_reply(text: str) -> dict[str, Any]:
    return {
        "version": SKILL_VERSION,
        "template": {"outputs": [{"simpleText": {"text": text}}]},
    }


class KakaoSkillAdapter:
    """Maps skill envelopes to `(question, user_id)` and answers back.

    Any failure is replaced by a fixed apology so the skill response contract
    always holds.
    """

    def __init__(self, service: _Asker, *, max_message_chars: int = 2999) -> None:
        self.service = service
        self.max_message_chars = max_message_chars

    @staticmethod
    def parse(payload: Any) -> tuple[str, str]:
        request = KakaoSkillRequest.model_validate(payload or {})
        return request.userRequest.utterance, request.userRequest.user.id or DEFAULT_USER_ID

    async def handle(self, payload: Any) -> dict[str, Any]:
        try:
            question, user_id = self.parse(payload)
            result = await self.service.ask(question, user_id)
        except Exception:
            logger.exception("Kakao skill request failed")
            return simple_text_reply(APOLOGY_MESSAGE)
        return simple_text_reply(result.text[: self.max_message_chars])
