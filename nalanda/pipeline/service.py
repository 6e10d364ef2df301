from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from time import perf_counter
from typing import Any
from uuid import uuid4

from nalanda.config import RerankSettings
from nalanda.focus_modes import FocusMode
from nalanda.llm.providers import ChatModel
from nalanda.models import (
    AnswerChunkEvent,
    ChatMessage,
    Document,
    EndEvent,
    ErrorEvent,
    PipelineEvent,
    PipelineInput,
    RetrievalResult,
    SourcesEvent,
)
from nalanda.retrieval.embeddings import EmbeddingProvider
from nalanda.retrieval.search import SearchBackend
from nalanda.retrieval.web_retriever import WebRetriever

from .context import format_context
from .generator import build_system_prompt, generate_answer
from .graph import build_retrieval_graph
from .state import PipelineStage, PipelineState, create_initial_state
from .telemetry import build_graph_invoke_config, emit_pipeline_telemetry

LOGGER = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error has occurred please try again later"


class AnswerPipeline:
    """Rewrite, search, rerank and generate for one focus mode.

    The compiled retrieval graph is built once and shared by every invocation;
    each call to :meth:`stream` owns its own state.
    """

    def __init__(
        self,
        *,
        chat_model: ChatModel,
        embedding_provider: EmbeddingProvider,
        search_backend: SearchBackend,
        focus_mode: FocusMode,
        search_language: str = "en",
        rerank_settings: RerankSettings | None = None,
    ) -> None:
        self._chat_model = chat_model
        self._focus_mode = focus_mode
        self._retrieval_graph = None
        if focus_mode.search:
            retriever = WebRetriever(
                search_backend,
                engine=focus_mode.engine or "",
                language=search_language,
            )
            self._retrieval_graph = build_retrieval_graph(
                chat_model=chat_model,
                retriever=retriever,
                embedding_provider=embedding_provider,
                retriever_prompt=focus_mode.retriever_prompt or "",
                rerank_settings=rerank_settings or RerankSettings(),
                rerank_enabled=focus_mode.rerank,
            )

    @property
    def focus_mode(self) -> FocusMode:
        return self._focus_mode

    def stream(self, pipeline_input: PipelineInput) -> AsyncIterator[PipelineEvent]:
        """Return the event stream for one invocation without starting any stage.

        Yields at most one ``SourcesEvent`` before any ``AnswerChunkEvent`` and
        ends with exactly one ``EndEvent`` or ``ErrorEvent``.
        """
        return self._run(pipeline_input.query, pipeline_input.history, uuid4().hex)

    def stream_query(
        self,
        query: str,
        history: Sequence[ChatMessage] = (),
    ) -> AsyncIterator[PipelineEvent]:
        """Like :meth:`stream`, but an invalid query surfaces as an ``ErrorEvent``."""
        return self._run(query, tuple(history), uuid4().hex)

    async def _run(
        self,
        query: str,
        history: tuple[ChatMessage, ...],
        request_id: str,
    ) -> AsyncIterator[PipelineEvent]:
        focus_key = self._focus_mode.key
        stage = (
            PipelineStage.REWRITING
            if self._retrieval_graph is not None
            else PipelineStage.GENERATING
        )
        graph_state: dict[str, Any] = {}
        telemetry_emitted = False
        chunk_count = 0
        started = perf_counter()
        try:
            pipeline_input = PipelineInput(query=query, history=history)
            sources: list[Document] = []
            if self._retrieval_graph is not None:
                initial_state = create_initial_state(
                    pipeline_input, focus_mode=focus_key, request_id=request_id
                )
                async for mode, chunk in self._retrieval_graph.astream(
                    initial_state,
                    config=build_graph_invoke_config(request_id, focus_key),
                    stream_mode=["updates", "values"],
                ):
                    if mode == "values":
                        graph_state = chunk
                        continue
                    for node_name, delta in chunk.items():
                        stage = _stage_after(node_name, delta or {})
                        LOGGER.debug(
                            "Pipeline stage advanced",
                            extra={"request_id": request_id, "stage": stage.value},
                        )
                telemetry_emitted = True
                emit_pipeline_telemetry(
                    request_id, focus_key, graph_state.get("telemetry_events")
                )
                retrieval = _retrieval_from_state(graph_state)
                if retrieval.search_skipped:
                    LOGGER.debug("Retrieval skipped", extra={"request_id": request_id})
                sources = list(retrieval.documents)
                stage = PipelineStage.GENERATING
                yield SourcesEvent(data=sources)

            LOGGER.debug(
                "Answer generation started",
                extra={
                    "request_id": request_id,
                    "focus_mode": focus_key,
                    "source_count": len(sources),
                },
            )
            system_prompt = build_system_prompt(
                self._focus_mode.response_prompt,
                format_context(sources),
            )
            async for fragment in generate_answer(
                self._chat_model,
                system_prompt,
                pipeline_input.history,
                pipeline_input.query,
            ):
                chunk_count += 1
                yield AnswerChunkEvent(data=fragment)
        except Exception:  # noqa: BLE001
            if not telemetry_emitted:
                emit_pipeline_telemetry(
                    request_id, focus_key, graph_state.get("telemetry_events")
                )
            failed_stage = stage
            stage = PipelineStage.FAILED
            LOGGER.exception(
                "Answer pipeline failed",
                extra={
                    "request_id": request_id,
                    "focus_mode": focus_key,
                    "stage": stage.value,
                    "failed_stage": failed_stage.value,
                    "chunk_count": chunk_count,
                },
            )
            yield ErrorEvent(data=GENERIC_ERROR_MESSAGE)
            return

        stage = PipelineStage.DONE
        LOGGER.info(
            "Answer pipeline completed",
            extra={
                "request_id": request_id,
                "focus_mode": focus_key,
                "stage": stage.value,
                "chunk_count": chunk_count,
                "duration_ms": int((perf_counter() - started) * 1000),
            },
        )
        yield EndEvent()


def stream_answer(
    query: str,
    history: Sequence[ChatMessage] = (),
    *,
    chat_model: ChatModel,
    embedding_provider: EmbeddingProvider,
    search_backend: SearchBackend,
    focus_mode: FocusMode,
    search_language: str = "en",
    rerank_settings: RerankSettings | None = None,
) -> AsyncIterator[PipelineEvent]:
    pipeline = AnswerPipeline(
        chat_model=chat_model,
        embedding_provider=embedding_provider,
        search_backend=search_backend,
        focus_mode=focus_mode,
        search_language=search_language,
        rerank_settings=rerank_settings,
    )
    return pipeline.stream_query(query, history)


def _stage_after(node_name: str, delta: PipelineState) -> PipelineStage:
    if node_name == "rewrite":
        if delta.get("search_skipped"):
            return PipelineStage.GENERATING
        return PipelineStage.RETRIEVING
    if node_name == "search":
        return PipelineStage.RERANKING
    return PipelineStage.GENERATING


def _retrieval_from_state(state: dict[str, Any]) -> RetrievalResult:
    sources = state.get("sources")
    if not isinstance(sources, list):
        sources = []
    resolved: list[Document] = []
    for source in sources:
        if isinstance(source, Document):
            resolved.append(source)
        elif isinstance(source, dict):
            resolved.append(Document.model_validate(source))
    rewritten_query = state.get("rewritten_query")
    return RetrievalResult(
        rewritten_query=rewritten_query if isinstance(rewritten_query, str) else "",
        documents=tuple(resolved),
    )
