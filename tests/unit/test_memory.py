import asyncio

from grounded_qa.agent.orchestrator import enrich_question
from grounded_qa.memory import InMemoryMemoryStore, render_memory
from grounded_qa.types import MemoryRole


def test_recent_entries_are_newest_first_and_limited() -> None:
    store = InMemoryMemoryStore()

    async def _scenario():
        for i in range(12):
            await store.append("u1", MemoryRole.USER, f"message {i}")
        await store.append("u2", MemoryRole.USER, "other user")
        return await store.get_recent("u1", 10)

    entries = asyncio.run(_scenario())

    assert len(entries) == 10
    assert entries[0].content == "message 11"
    assert entries[-1].content == "message 2"


def test_render_and_enrich() -> None:
    store = InMemoryMemoryStore()

    async def _scenario():
        await store.append("u1", MemoryRole.USER, "How many leave days?")
        await store.append("u1", MemoryRole.ASSISTANT, "Fifteen.")
        return await store.get_recent("u1", 10)

    rendered = render_memory(asyncio.run(_scenario()))

    assert rendered == "assistant: Fifteen.\nuser: How many leave days?"
    assert enrich_question("And sick leave?", rendered) == (
        "And sick leave?\n(previous conversation)\n" + rendered
    )
    assert enrich_question("And sick leave?", "") == "And sick leave?"
