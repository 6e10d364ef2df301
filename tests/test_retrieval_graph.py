from collections.abc import AsyncIterator, Sequence

import pytest

from nalanda.config import RerankSettings
from nalanda.focus_modes import COLLEGE_FINDER
from nalanda.llm.providers import ChatModel
from nalanda.models import ChatMessage, PipelineInput
from nalanda.pipeline import build_retrieval_graph, create_initial_state
from nalanda.prompts import NO_SEARCH_SENTINEL
from nalanda.retrieval.embeddings import EmbeddingProvider
from nalanda.retrieval.search import SearchOptions, SearchResult
from nalanda.retrieval.web_retriever import WebRetriever


class _FakeChatModel(ChatModel):
    def __init__(
        self,
        rewrite: str = "best computer science programs",
        chunks: Sequence[str] = ("Here are ", "some ", "programs."),
        fail_on_generate: bool = False,
        fail_after_chunks: int | None = None,
    ) -> None:
        self._rewrite = rewrite
        self._chunks = list(chunks)
        self._fail_on_generate = fail_on_generate
        self._fail_after_chunks = fail_after_chunks
        self.generate_calls: list[tuple[str, tuple[ChatMessage, ...], str]] = []
        self.stream_calls: list[tuple[str, tuple[ChatMessage, ...], str]] = []

    async def generate(
        self,
        prompt_template: str,
        history: Sequence[ChatMessage],
        query: str,
    ) -> str:
        self.generate_calls.append((prompt_template, tuple(history), query))
        if self._fail_on_generate:
            raise RuntimeError("rewrite model unavailable")
        return self._rewrite

    async def stream(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        query: str,
    ) -> AsyncIterator[str]:
        self.stream_calls.append((system_prompt, tuple(history), query))
        for index, chunk in enumerate(self._chunks):
            if self._fail_after_chunks is not None and index == self._fail_after_chunks:
                raise RuntimeError("stream interrupted")
            yield chunk


class _FakeSearchBackend:
    def __init__(
        self,
        results: Sequence[SearchResult] = (),
        should_raise: bool = False,
    ) -> None:
        self._results = list(results)
        self._should_raise = should_raise
        self.calls: list[tuple[str, SearchOptions]] = []

    async def search(self, query: str, options: SearchOptions) -> list[SearchResult]:
        self.calls.append((query, options))
        if self._should_raise:
            raise RuntimeError("search backend down")
        return list(self._results)


class _FakeEmbeddingProvider(EmbeddingProvider):
    """Embeds each text as a one-dimensional vector holding its preset score.

    The query embeds as ``[1.0]``, so with the ``dot`` measure a document's
    similarity equals its preset score exactly.
    """

    def __init__(
        self,
        scores: dict[str, float] | None = None,
        should_raise: bool = False,
    ) -> None:
        self._scores = scores or {}
        self._should_raise = should_raise
        self.document_calls: list[list[str]] = []
        self.query_calls: list[str] = []

    @property
    def call_count(self) -> int:
        return len(self.document_calls) + len(self.query_calls)

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        if self._should_raise:
            raise RuntimeError("embedding service failed")
        return [[self._scores.get(text, 0.0)] for text in texts]

    async def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        if self._should_raise:
            raise RuntimeError("embedding service failed")
        return [1.0]


def _result(index: int, content: str | None = None) -> SearchResult:
    return SearchResult(
        title=f"Thread {index}",
        url=f"https://www.reddit.com/r/college/comments/{index}",
        content=content if content is not None else f"discussion {index}",
    )


def _graph(
    chat_model: _FakeChatModel,
    backend: _FakeSearchBackend,
    embeddings: _FakeEmbeddingProvider,
    rerank_enabled: bool = True,
):
    return build_retrieval_graph(
        chat_model=chat_model,
        retriever=WebRetriever(backend, engine="reddit", language="en"),
        embedding_provider=embeddings,
        retriever_prompt=COLLEGE_FINDER.retriever_prompt or "",
        rerank_settings=RerankSettings(similarity_measure="dot"),
        rerank_enabled=rerank_enabled,
    )


def _events(result: dict, name: str) -> list[dict]:
    return [
        event for event in result.get("telemetry_events", []) if event["event"] == name
    ]


@pytest.mark.asyncio
async def test_retrieval_graph_runs_rewrite_search_and_rerank() -> None:
    backend = _FakeSearchBackend([_result(1), _result(2)])
    embeddings = _FakeEmbeddingProvider({"discussion 1": 0.2, "discussion 2": 0.8})
    graph = _graph(_FakeChatModel(rewrite=" top robotics colleges \n"), backend, embeddings)

    result = await graph.ainvoke(
        create_initial_state(PipelineInput(query="robotics?"), "college_finder")
    )

    assert result["rewritten_query"] == "top robotics colleges"
    assert backend.calls[0][0] == "top robotics colleges"
    assert embeddings.query_calls == ["top robotics colleges"]
    assert [doc.title for doc in result["sources"]] == ["Thread 2"]
    assert _events(result, "rewrite_completed")
    assert _events(result, "search_completed")[0]["count"] == 2
    assert _events(result, "rerank_completed")[0]["count"] == 1


@pytest.mark.asyncio
async def test_retrieval_graph_sentinel_ends_after_rewrite() -> None:
    backend = _FakeSearchBackend([_result(1)])
    embeddings = _FakeEmbeddingProvider()
    graph = _graph(_FakeChatModel(rewrite=NO_SEARCH_SENTINEL), backend, embeddings)

    result = await graph.ainvoke(
        create_initial_state(PipelineInput(query="thanks!"), "college_finder")
    )

    assert result["search_skipped"] is True
    assert result["rewritten_query"] == ""
    assert result["sources"] == []
    assert backend.calls == []
    assert _events(result, "retrieval_skipped")
    assert not _events(result, "search_completed")


@pytest.mark.asyncio
async def test_retrieval_graph_blank_rewrite_skips_search() -> None:
    backend = _FakeSearchBackend([_result(1)])
    graph = _graph(_FakeChatModel(rewrite="   "), backend, _FakeEmbeddingProvider())

    result = await graph.ainvoke(
        create_initial_state(PipelineInput(query="ok"), "college_finder")
    )

    assert result["search_skipped"] is True
    assert backend.calls == []


@pytest.mark.asyncio
async def test_retrieval_graph_passthrough_when_rerank_disabled() -> None:
    backend = _FakeSearchBackend([_result(1), _result(2)])
    embeddings = _FakeEmbeddingProvider()
    graph = _graph(_FakeChatModel(), backend, embeddings, rerank_enabled=False)

    result = await graph.ainvoke(
        create_initial_state(PipelineInput(query="gpa needed"), "resume_builder")
    )

    assert [doc.title for doc in result["sources"]] == ["Thread 1", "Thread 2"]
    assert embeddings.call_count == 0
    assert _events(result, "rerank_completed")[0]["strategy"] == "passthrough"
