"""Per-request tracing and groundedness evaluation."""

from __future__ import annotations

import re
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

_TOKEN_PATTERN = re.compile(r"\w+|[^\w\s]", flags=re.UNICODE)


@dataclass(slots=True)
class TraceRecord:
    trace_id: str
    timestamp_utc: str
    user_id: str
    question: str
    agents: list[str]
    verified: bool
    answer: str
    citations: str
    context_ids: list[str]
    latency_ms: float
    groundedness: float


class GroundednessEvaluator:
    """Lexical proxy for how well an answer is supported by its context.

    - Split answer into sentences.
    - Remove citation tags like `[2]`.
    - A sentence is grounded if at least one excerpt covers at least
      `min_overlap` of its tokens.
    """

    def __init__(self, min_overlap: float = 0.35) -> None:
        self.min_overlap = min_overlap

    def score(self, answer: str, excerpts: list[str]) -> float:
        sentences = [
            sentence.strip()
            for sentence in re.split(r"(?<=[.!?。！？])\s+", answer)
            if sentence.strip()
        ]
        if not sentences:
            return 1.0
        if not excerpts:
            return 0.0

        excerpt_token_sets = [set(self._normalize(excerpt)) for excerpt in excerpts]
        grounded = 0

        for sentence in sentences:
            clean_sentence = re.sub(r"\[[^\]]+\]", "", sentence).strip()
            sentence_tokens = set(self._normalize(clean_sentence))
            if not sentence_tokens:
                grounded += 1
                continue

            if any(
                self._overlap(sentence_tokens, excerpt_tokens) >= self.min_overlap
                for excerpt_tokens in excerpt_token_sets
            ):
                grounded += 1

        return grounded / len(sentences)

    @staticmethod
    def _normalize(text: str) -> list[str]:
        return [token.lower() for token in _TOKEN_PATTERN.findall(text)]

    @staticmethod
    def _overlap(a: set[str], b: set[str]) -> float:
        if not a or not b:
            return 0.0
        return len(a & b) / len(a)


class TraceStore:
    """In-memory trace storage for API-level observability."""

    def __init__(
        self,
        *,
        groundedness_evaluator: GroundednessEvaluator | None = None,
        max_records: int = 1000,
    ) -> None:
        self._records: dict[str, TraceRecord] = {}
        self._groundedness = groundedness_evaluator or GroundednessEvaluator()
        self._max_records = max_records

    def create_record(
        self,
        *,
        user_id: str,
        question: str,
        agents: list[str],
        verified: bool,
        answer: str,
        citations: str,
        scored_text: str | None = None,
        context: list[tuple[str, str]],
        latency_ms: float,
    ) -> TraceRecord:
        """Store a trace; `context` holds `(id, content)` pairs in answer order.

        Groundedness is scored on `scored_text` when given, so the appended
        source list does not count as an answer sentence.
        """
        record = TraceRecord(
            trace_id=str(uuid.uuid4()),
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
            user_id=user_id,
            question=question,
            agents=agents,
            verified=verified,
            answer=answer,
            citations=citations,
            context_ids=[hit_id for hit_id, _ in context],
            latency_ms=latency_ms,
            groundedness=self._groundedness.score(
                answer if scored_text is None else scored_text,
                [text for _, text in context]),
        )
        self._records[record.trace_id] = record
        while len(self._records) > self._max_records:
            self._records.pop(next(iter(self._records)))
        return record

    def get(self, trace_id: str) -> TraceRecord:
        record = self._records.get(trace_id)
        if record is None:
            raise KeyError(f"Trace not found: {trace_id}")
        return record

    def list_recent(self, limit: int = 20) -> list[TraceRecord]:
        if limit <= 0:
            return []
        return list(self._records.values())[-limit:]

    def summary(self) -> dict[str, float | int]:
        """Aggregate latency, groundedness and verification counts."""
        records = list(self._records.values())
        total = len(records)
        if total == 0:
            return {
                "total_requests": 0,
                "verified_requests": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "avg_groundedness": 0.0,
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_requests": total,
            "verified_requests": sum(1 for record in records if record.verified),
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "avg_groundedness": sum(record.groundedness for record in records) / total,
        }


class Timer:
    """Simple context timer used by the orchestrator."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
