from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from nalanda.config import RerankSettings
from nalanda.errors import EmbeddingError
from nalanda.models import Document
from nalanda.retrieval.embeddings import EmbeddingProvider
from nalanda.retrieval.scoring import compute_similarity


@dataclass(frozen=True)
class ScoredDocument:
    document: Document
    score: float


async def rerank_documents(
    query: str,
    documents: Sequence[Document],
    embedding_provider: EmbeddingProvider,
    settings: RerankSettings | None = None,
) -> list[Document]:
    """Order documents by embedding similarity to the query.

    Documents at or below the similarity threshold are dropped, ties keep their
    retrieval order, and at most ``settings.max_sources`` documents are returned.
    An empty input makes no embedding calls.
    """
    if not documents:
        return list(documents)

    resolved = settings or RerankSettings()
    candidates = [document for document in documents if document.content]
    if not candidates:
        return []

    document_task = asyncio.ensure_future(
        embedding_provider.embed_documents(
            [document.content for document in candidates]
        )
    )
    query_task = asyncio.ensure_future(embedding_provider.embed_query(query))
    try:
        document_embeddings, query_embedding = await asyncio.gather(
            document_task, query_task
        )
    except BaseException:
        # gather leaves the sibling running when one side fails
        for task in (document_task, query_task):
            task.cancel()
        raise
    if len(document_embeddings) != len(candidates):
        raise EmbeddingError(
            f"Expected {len(candidates)} document embeddings, "
            f"got {len(document_embeddings)}"
        )

    scored = score_documents(
        query_embedding,
        candidates,
        document_embeddings,
        measure=resolved.similarity_measure,
    )
    return select_top_documents(
        scored,
        threshold=resolved.similarity_threshold,
        max_results=resolved.max_sources,
    )


def score_documents(
    query_embedding: Sequence[float],
    documents: Sequence[Document],
    document_embeddings: Sequence[Sequence[float]],
    measure: str = "cosine",
) -> list[ScoredDocument]:
    return [
        ScoredDocument(
            document=document,
            score=compute_similarity(query_embedding, embedding, measure),
        )
        for document, embedding in zip(documents, document_embeddings)
    ]


def select_top_documents(
    scored: Sequence[ScoredDocument],
    threshold: float,
    max_results: int,
) -> list[Document]:
    retained = [item for item in scored if item.score > threshold]
    # sorted() is stable with reverse=True, so equal scores keep retrieval order
    ranked = sorted(retained, key=lambda item: item.score, reverse=True)
    return [item.document for item in ranked[:max_results]]
