from __future__ import annotations

import hashlib

from nalanda.config import AppConfig
from nalanda.errors import ConfigurationError


class EmbeddingProvider:
    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise NotImplementedError

    async def embed_query(self, text: str) -> list[float]:
        raise NotImplementedError


class DeterministicEmbeddingProvider(EmbeddingProvider):
    def __init__(self, dimensions: int) -> None:
        self._dimensions = dimensions

    def _hash_vector(self, text: str) -> list[float]:
        required_bytes = max(self._dimensions, 64)
        digest_source = b""
        seed = text.encode("utf-8")
        while len(digest_source) < required_bytes:
            seed = hashlib.sha256(seed).digest()
            digest_source += seed
        return [value / 255.0 for value in digest_source[: self._dimensions]]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._hash_vector(text) for text in texts]

    async def embed_query(self, text: str) -> list[float]:
        return self._hash_vector(text)


class GoogleGenerativeAIEmbeddingProvider(EmbeddingProvider):
    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        dimensions: int,
    ) -> None:
        from langchain_google_genai import GoogleGenerativeAIEmbeddings

        self._dimensions = dimensions
        self._embeddings = GoogleGenerativeAIEmbeddings(
            model=model,
            google_api_key=api_key,
            task_type="RETRIEVAL_DOCUMENT",
        )
        self._query_embeddings = GoogleGenerativeAIEmbeddings(
            model=model,
            google_api_key=api_key,
            task_type="RETRIEVAL_QUERY",
        )

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        rows = await self._embeddings.aembed_documents(
            texts, output_dimensionality=self._dimensions
        )
        return [list(row) for row in rows]

    async def embed_query(self, text: str) -> list[float]:
        return list(
            await self._query_embeddings.aembed_query(
                text, output_dimensionality=self._dimensions
            )
        )


def build_embedding_provider(config: AppConfig) -> EmbeddingProvider:
    if config.embedding_backend == "deterministic":
        return DeterministicEmbeddingProvider(dimensions=config.embedding_dimensions)
    if not config.gemini_api_key:
        raise ConfigurationError(
            "Gemini API key is required for the google embedding backend."
        )
    return GoogleGenerativeAIEmbeddingProvider(
        api_key=config.gemini_api_key,
        model=config.embedding_model,
        dimensions=config.embedding_dimensions,
    )
