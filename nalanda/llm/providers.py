from __future__ import annotations

from collections.abc import AsyncIterator, Sequence

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate

from nalanda.config import AppConfig
from nalanda.errors import ConfigurationError
from nalanda.history import format_chat_history_as_string, to_langchain_messages
from nalanda.models import ChatMessage


class ChatModel:
    async def generate(
        self,
        prompt_template: str,
        history: Sequence[ChatMessage],
        query: str,
    ) -> str:
        raise NotImplementedError

    def stream(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        query: str,
    ) -> AsyncIterator[str]:
        raise NotImplementedError


class GeminiChatModel(ChatModel):
    def __init__(self, *, api_key: str, model: str, temperature: float) -> None:
        from langchain_google_genai import ChatGoogleGenerativeAI

        self._model = ChatGoogleGenerativeAI(
            model=model,
            google_api_key=api_key,
            temperature=temperature,
            max_retries=1,
        )
        self._parser = StrOutputParser()

    async def generate(
        self,
        prompt_template: str,
        history: Sequence[ChatMessage],
        query: str,
    ) -> str:
        chain = PromptTemplate.from_template(prompt_template) | self._model | self._parser
        return await chain.ainvoke(
            {
                "chat_history": format_chat_history_as_string(history),
                "query": query,
            }
        )

    async def stream(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        query: str,
    ) -> AsyncIterator[str]:
        messages = [
            SystemMessage(content=system_prompt),
            *to_langchain_messages(history),
            HumanMessage(content=query),
        ]
        chain = self._model | self._parser
        async for chunk in chain.astream(messages):
            if chunk:
                yield chunk


def build_chat_model(config: AppConfig) -> ChatModel:
    if not config.gemini_api_key:
        raise ConfigurationError("Gemini API key is not configured.")
    return GeminiChatModel(
        api_key=config.gemini_api_key,
        model=config.chat_model,
        temperature=config.chat_temperature,
    )
