from __future__ import annotations

from langgraph.graph import END, START, StateGraph

from nalanda.config import RerankSettings
from nalanda.llm.providers import ChatModel
from nalanda.retrieval.embeddings import EmbeddingProvider
from nalanda.retrieval.web_retriever import WebRetriever

from .nodes import make_rerank_node, make_rewrite_node, make_search_node
from .state import PipelineState


def build_retrieval_graph(
    chat_model: ChatModel,
    retriever: WebRetriever,
    embedding_provider: EmbeddingProvider,
    retriever_prompt: str,
    rerank_settings: RerankSettings,
    rerank_enabled: bool,
):
    graph_builder = StateGraph(PipelineState)

    graph_builder.add_node("rewrite", make_rewrite_node(chat_model, retriever_prompt))
    graph_builder.add_node("search", make_search_node(retriever))
    graph_builder.add_node(
        "rerank",
        make_rerank_node(
            embedding_provider,
            settings=rerank_settings,
            enabled=rerank_enabled,
        ),
    )

    graph_builder.add_edge(START, "rewrite")
    graph_builder.add_conditional_edges("rewrite", _route_after_rewrite)
    graph_builder.add_edge("search", "rerank")
    graph_builder.add_edge("rerank", END)

    return graph_builder.compile()


def _route_after_rewrite(state: PipelineState) -> str:
    if state.get("search_skipped"):
        return END
    return "search"
