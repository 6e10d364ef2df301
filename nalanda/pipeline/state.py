from __future__ import annotations

import operator
from enum import Enum
from typing import Annotated, Any, TypedDict

from nalanda.models import ChatMessage, Document, PipelineInput


class PipelineStage(str, Enum):
    REWRITING = "rewriting"
    RETRIEVING = "retrieving"
    RERANKING = "reranking"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


class PipelineState(TypedDict, total=False):
    request_id: str
    focus_mode: str
    query: str
    history: tuple[ChatMessage, ...]
    rewritten_query: str
    search_skipped: bool
    documents: list[Document]
    sources: list[Document]
    telemetry_events: Annotated[list[dict[str, Any]], operator.add]


def create_initial_state(
    pipeline_input: PipelineInput,
    focus_mode: str,
    request_id: str = "unknown",
) -> PipelineState:
    return {
        "request_id": request_id,
        "focus_mode": focus_mode,
        "query": pipeline_input.query,
        "history": pipeline_input.history,
        "rewritten_query": "",
        "search_skipped": False,
        "documents": [],
        "sources": [],
        "telemetry_events": [],
    }
