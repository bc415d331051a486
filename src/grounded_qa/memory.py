"""Conversational memory contract and rendering."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from grounded_qa.types import MemoryEntry, MemoryRole


class MemoryStore(Protocol):
    """Append-only per-user history owned outside the pipeline."""

    async def get_recent(self, user_id: str, limit: int) -> list[MemoryEntry]:
        """Return at most `limit` entries, newest first."""

    async def append(self, user_id: str, role: MemoryRole, content: str) -> None:
        """Append one entry to the user's history."""


class InMemoryMemoryStore:
    """Process-local memory store for tests and single-process deployments."""

    def __init__(self) -> None:
        self._entries: dict[str, list[MemoryEntry]] = {}

    async def get_recent(self, user_id: str, limit: int) -> list[MemoryEntry]:
        if limit <= 0:
            return []
        history = self._entries.get(user_id, [])
        return list(reversed(history[-limit:]))

    async def append(self, user_id: str, role: MemoryRole, content: str) -> None:
        self._entries.setdefault(user_id, []).append(
            MemoryEntry(role=MemoryRole(role), content=content)
        )


def render_memory(entries: Sequence[MemoryEntry]) -> str:
    """Render entries as `role: content` lines in the order given."""
    return "\n".join(f"{entry.role.value}: {entry.content}" for entry in entries)
