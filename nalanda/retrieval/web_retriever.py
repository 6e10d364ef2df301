from __future__ import annotations

from nalanda.models import Document
from nalanda.retrieval.search import (
    SearchBackend,
    SearchOptions,
    normalize_search_result,
)


class WebRetriever:
    def __init__(self, search_backend: SearchBackend, engine: str, language: str) -> None:
        self._search_backend = search_backend
        self._options = SearchOptions(language=language, engines=(engine,))

    @property
    def options(self) -> SearchOptions:
        return self._options

    async def retrieve(self, query: str) -> list[Document]:
        if not query:
            return []
        results = await self._search_backend.search(query, self._options)
        return [normalize_search_result(result) for result in results]
