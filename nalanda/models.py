from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ChatRole(str, Enum):
    HUMAN = "human"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    role: ChatRole
    content: str


class Document(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    title: str
    url: str
    image: str | None = None


class RetrievalResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    rewritten_query: str = ""
    documents: tuple[Document, ...] = tuple()

    @property
    def search_skipped(self) -> bool:
        return not self.rewritten_query and not self.documents


class PipelineInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str = Field(min_length=1)
    history: tuple[ChatMessage, ...] = tuple()


class SourcesEvent(BaseModel):
    type: Literal["sources"] = "sources"
    data: list[Document]


class AnswerChunkEvent(BaseModel):
    type: Literal["response"] = "response"
    data: str


class EndEvent(BaseModel):
    type: Literal["end"] = "end"


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    data: str


PipelineEvent = Annotated[
    Union[SourcesEvent, AnswerChunkEvent, EndEvent, ErrorEvent],
    Field(discriminator="type"),
]


class ChatRequest(BaseModel):
    query: str = Field(min_length=1)
    history: list[ChatMessage] = Field(default_factory=list)
    focus_mode: str | None = None


class FocusModeSummary(BaseModel):
    key: str
    title: str
    engine: str | None
    search: bool
    rerank: bool
