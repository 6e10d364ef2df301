from __future__ import annotations

from time import perf_counter

from nalanda.config import RerankSettings
from nalanda.llm.providers import ChatModel
from nalanda.prompts import NO_SEARCH_SENTINEL
from nalanda.retrieval.embeddings import EmbeddingProvider
from nalanda.retrieval.rerank import rerank_documents
from nalanda.retrieval.web_retriever import WebRetriever

from .state import PipelineState


def make_rewrite_node(chat_model: ChatModel, retriever_prompt: str):
    async def _node(state: PipelineState) -> PipelineState:
        started = perf_counter()
        output = await chat_model.generate(
            retriever_prompt,
            state.get("history", ()),
            state.get("query", ""),
        )
        # exact match only, see DESIGN.md
        if output == NO_SEARCH_SENTINEL:
            return {
                "rewritten_query": "",
                "search_skipped": True,
                "documents": [],
                "sources": [],
                "telemetry_events": [
                    {
                        "event": "retrieval_skipped",
                        "reason": "sentinel",
                        "duration_ms": _duration_ms(started),
                    }
                ],
            }

        rewritten = output.strip()
        return {
            "rewritten_query": rewritten,
            "search_skipped": not rewritten,
            "telemetry_events": [
                {
                    "event": "rewrite_completed",
                    "query_length": len(rewritten),
                    "duration_ms": _duration_ms(started),
                }
            ],
        }

    return _node


def make_search_node(retriever: WebRetriever):
    async def _node(state: PipelineState) -> PipelineState:
        started = perf_counter()
        documents = await retriever.retrieve(state.get("rewritten_query", ""))
        return {
            "documents": documents,
            "telemetry_events": [
                {
                    "event": "search_completed",
                    "engines": list(retriever.options.engines),
                    "count": len(documents),
                    "duration_ms": _duration_ms(started),
                }
            ],
        }

    return _node


def make_rerank_node(
    embedding_provider: EmbeddingProvider,
    settings: RerankSettings,
    enabled: bool,
):
    async def _node(state: PipelineState) -> PipelineState:
        documents = state.get("documents", [])
        if not enabled:
            return {
                "sources": list(documents),
                "telemetry_events": [
                    {
                        "event": "rerank_completed",
                        "strategy": "passthrough",
                        "count": len(documents),
                    }
                ],
            }

        started = perf_counter()
        sources = await rerank_documents(
            state.get("rewritten_query", ""),
            documents,
            embedding_provider,
            settings,
        )
        return {
            "sources": sources,
            "telemetry_events": [
                {
                    "event": "rerank_completed",
                    "strategy": f"embedding_{settings.similarity_measure}",
                    "input_count": len(documents),
                    "count": len(sources),
                    "duration_ms": _duration_ms(started),
                }
            ],
        }

    return _node


def _duration_ms(started: float) -> int:
    return int((perf_counter() - started) * 1000)
