"""Master pipeline: memory -> route -> retrieve -> generate -> verify -> cite."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from grounded_qa.agent.citations import build_citations
from grounded_qa.config import PipelineConfig
from grounded_qa.errors import ConfigError
from grounded_qa.memory import MemoryStore, render_memory
from grounded_qa.obs.tracing import Timer, TraceStore
from grounded_qa.retrieval.retriever import HybridRetriever
from grounded_qa.types import AgentName, AnswerResult, MemoryRole, RetrievalHit, RouteDecision

logger = logging.getLogger(__name__)


class Router(Protocol):
    async def route(self, question: str) -> RouteDecision: ...


class Generator(Protocol):
    async def generate(self, question: str, context: Sequence[RetrievalHit]) -> str: ...


class Verifier(Protocol):
    async def verify(
        self, question: str, draft: str, context: Sequence[RetrievalHit]
    ) -> str: ...


def enrich_question(question: str, memory_text: str) -> str:
    """Attach rendered conversation history to the raw question."""
    if not memory_text:
        return question
    return f"{question}\n(previous conversation)\n{memory_text}"


class MasterPipeline:
    """Runs one linear pass of the multi-agent QA pipeline per request.

    The pipeline has no retries. Router, generator and verifier failures
    propagate to the caller; retrieval failures only empty the affected
    agent's context.
    """

    def __init__(
        self,
        *,
        router: Router,
        generator: Generator,
        verifier: Verifier,
        retriever: HybridRetriever,
        memory: MemoryStore,
        config: PipelineConfig | None = None,
        trace_store: TraceStore | None = None,
    ) -> None:
        self.router = router
        self.generator = generator
        self.verifier = verifier
        self.retriever = retriever
        self.memory = memory
        self.config = config or PipelineConfig()
        self.trace_store = trace_store

        missing = [
            agent.value
            for agent in _RETRIEVAL_AGENTS
            if agent.value not in self.config.namespaces
        ]
        if missing:
            raise ConfigError(f"no namespace configured for agents: {', '.join(missing)}")

    async def ask(self, question: str, user_id: str) -> AnswerResult:
        """Answer a question and record both turns in the user's history.

        The question is saved before the pipeline runs and the answer after
        it completes.
        """

        if not question or not question.strip():
            raise ConfigError("question required")

        with Timer() as timer:
            await self.memory.append(user_id, MemoryRole.USER, question)
            result = await self.answer(question, user_id)
            await self.memory.append(user_id, MemoryRole.ASSISTANT, result.text)

        if self.trace_store is not None:
            self.trace_store.create_record(
                user_id=user_id,
                question=question,
                agents=sorted(agent.value for agent in result.route.agents) if result.route else [],
                verified=result.verified,
                answer=result.text,
                scored_text=result.final_answer,
                citations=build_citations(result.used_context),
                context=[(hit.id, hit.content) for hit in result.used_context],
                latency_ms=timer.elapsed_ms,
            )
        return result

    async def answer(self, question: str, user_id: str) -> AnswerResult:
        """Run the pipeline without touching memory beyond the history read."""

        entries = await self.memory.get_recent(user_id, self.config.memory_limit)
        enriched = enrich_question(question, render_memory(entries))

        decision = await self.router.route(enriched)
        contexts = await self._retrieve_all(decision, enriched)
        used_context = [hit for agent in _RETRIEVAL_AGENTS for hit in contexts[agent]]

        draft = await self.generator.generate(enriched, used_context)
        verified = AgentName.FACTCHECK in decision
        final_text = (
            await self.verifier.verify(enriched, draft, used_context) if verified else draft
        )

        citations = build_citations(used_context)
        text = f"{final_text}\n\n{self.config.citation_label} {citations}".strip()
        logger.info(
            "Answered for user %s with %d excerpts (verified=%s)",
            user_id,
            len(used_context),
            verified,
        )
        return AnswerResult(
            text=text,
            used_context=used_context,
            route=decision,
            verified=verified,
            final_answer=final_text,
        )

    async def _retrieve_all(
        self, decision: RouteDecision, question: str
    ) -> dict[AgentName, list[RetrievalHit]]:
        selected = [agent for agent in _RETRIEVAL_AGENTS if agent in decision]
        results = await asyncio.gather(
            *(
                self.retriever.retrieve(self.config.namespaces[agent.value], question)
                for agent in selected
            ),
            return_exceptions=True,
        )

        contexts: dict[AgentName, list[RetrievalHit]] = {
            agent: [] for agent in _RETRIEVAL_AGENTS
        }
        for agent, result in zip(selected, results, strict=True):
            if isinstance(result, Exception):
                logger.warning("Retrieval for agent %s failed: %s", agent.value, result)
                continue
            if isinstance(result, BaseException):
                raise result
            contexts[agent] = result
        return contexts


def _retrieval_agents() -> tuple[AgentName, ...]:
    agents: list[AgentName] = []
    for agent in AgentName:
        if agent is AgentName.PDF or agent is AgentName.LAW:
            agents.append(agent)
        elif agent is AgentName.FACTCHECK:
            continue  # gates verification only
        else:
            raise ValueError(f"Unhandled agent: {agent}")
    return tuple(agents)


_RETRIEVAL_AGENTS = _retrieval_agents()
