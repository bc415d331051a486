"""LLM-backed question router with a fail-open fallback."""

from __future__ import annotations

import json
import logging
from typing import Any

from grounded_qa.errors import MalformedRouterOutputError
from grounded_qa.llm import ChatService
from grounded_qa.types import AgentName, RouteDecision

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = """
You are a router. Read the user's question and decide which agents to consult.
Output JSON only, with no prose and no code fences.

Agents:
- pdf: internal company policy documents
- law: statutes and legal references
- factcheck: verify the drafted answer against the retrieved evidence

Format: {"agents": ["pdf", "law", "factcheck"]}
Select zero or more agents.
""".strip()


def parse_route(raw: str) -> RouteDecision:
    """Parse classifier output into a `RouteDecision`.

    Raises:
        MalformedRouterOutputError: if `raw` is not a JSON object with an
            `agents` list of known agent names.
    """

    try:
        payload: Any = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedRouterOutputError(f"router output is not JSON: {raw!r}") from exc

    if not isinstance(payload, dict):
        raise MalformedRouterOutputError("router output is not a JSON object")
    names = payload.get("agents")
    if not isinstance(names, list):
        raise MalformedRouterOutputError("router output has no `agents` list")

    agents: set[AgentName] = set()
    for name in names:
        if not isinstance(name, str):
            raise MalformedRouterOutputError(f"agent name is not a string: {name!r}")
        try:
            agents.add(AgentName(name.strip().lower()))
        except ValueError as exc:
            raise MalformedRouterOutputError(f"unknown agent: {name!r}") from exc
    return RouteDecision(agents=frozenset(agents))


class AgentRouter:
    """Classifies a question into the set of agents to consult."""

    def __init__(self, chat: ChatService, *, temperature: float = 0.0) -> None:
        self.chat = chat
        self.temperature = temperature

    async def route(self, question: str) -> RouteDecision:
        raw = await self.chat.complete(_SYSTEM_PROMPT, question, self.temperature)
        try:
            decision = parse_route(raw)
        except MalformedRouterOutputError as exc:
            logger.warning("Router fell back to all agents: %s", exc)
            return RouteDecision.all_agents()
        logger.info("Routed question to %s", sorted(agent.value for agent in decision.agents))
        return decision
