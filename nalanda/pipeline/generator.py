from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from datetime import datetime, timezone

from nalanda.llm.providers import ChatModel
from nalanda.models import ChatMessage


def build_system_prompt(
    response_prompt: str,
    context: str,
    now: datetime | None = None,
) -> str:
    current = now or datetime.now(timezone.utc)
    return response_prompt.format(context=context, date=current.isoformat())


async def generate_answer(
    chat_model: ChatModel,
    system_prompt: str,
    history: Sequence[ChatMessage],
    query: str,
) -> AsyncIterator[str]:
    async for fragment in chat_model.stream(system_prompt, history, query):
        if fragment:
            yield fragment
