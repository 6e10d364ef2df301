from __future__ import annotations

from collections.abc import Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from nalanda.models import ChatMessage, ChatRole


def format_chat_history_as_string(history: Sequence[ChatMessage]) -> str:
    return "\n".join(f"{message.role.value}: {message.content}" for message in history)


def to_langchain_messages(history: Sequence[ChatMessage]) -> list[BaseMessage]:
    messages: list[BaseMessage] = []
    for message in history:
        if message.role == ChatRole.HUMAN:
            messages.append(HumanMessage(content=message.content))
        else:
            messages.append(AIMessage(content=message.content))
    return messages
