import asyncio

import pytest

from grounded_qa.agent.router import AgentRouter, parse_route
from grounded_qa.errors import MalformedRouterOutputError
from grounded_qa.types import AgentName, RouteDecision

ALL_AGENTS = frozenset({AgentName.PDF, AgentName.LAW, AgentName.FACTCHECK})


class _CannedChat:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls: list[tuple[str, str, float]] = []

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float) -> str:
        self.calls.append((system_prompt, user_prompt, temperature))
        return self.reply


def _route(reply: str) -> RouteDecision:
    return asyncio.run(AgentRouter(_CannedChat(reply)).route("question"))


def test_non_json_output_selects_all_agents() -> None:
    assert _route("not json").agents == ALL_AGENTS


@pytest.mark.parametrize(
    "reply",
    [
        '["pdf"]',
        '{"agent": ["pdf"]}',
        '{"agents": "pdf"}',
        '{"agents": ["pdf", 3]}',
        '{"agents": ["pdf", "weather"]}',
        "",
    ],
)
def test_malformed_shapes_fail_open(reply: str) -> None:
    assert _route(reply).agents == ALL_AGENTS


def test_valid_output_selects_named_agents() -> None:
    decision = _route('{"agents": ["pdf", "factcheck"]}')

    assert decision.agents == frozenset({AgentName.PDF, AgentName.FACTCHECK})
    assert "pdf" in decision
    assert AgentName.LAW not in decision


def test_empty_agent_list_is_respected() -> None:
    assert _route('{"agents": []}').agents == frozenset()


def test_router_uses_deterministic_temperature() -> None:
    chat = _CannedChat('{"agents": ["law"]}')

    asyncio.run(AgentRouter(chat).route("Is overtime pay mandatory?"))

    system_prompt, user_prompt, temperature = chat.calls[0]
    assert "JSON" in system_prompt
    assert user_prompt == "Is overtime pay mandatory?"
    assert temperature == 0.0


def test_parse_route_reports_unknown_agent() -> None:
    with pytest.raises(MalformedRouterOutputError, match="unknown agent"):
        parse_route('{"agents": ["hr"]}')
