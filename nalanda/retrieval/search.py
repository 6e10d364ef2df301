from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from nalanda.errors import SearchBackendError
from nalanda.models import Document

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchOptions:
    language: str
    engines: tuple[str, ...]


class SearchResult(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str
    url: str
    content: str | None = None
    img_src: str | None = None


class SearchBackend(Protocol):
    async def search(self, query: str, options: SearchOptions) -> list[SearchResult]: ...


class SearxngSearchClient:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def search(self, query: str, options: SearchOptions) -> list[SearchResult]:
        params = {"q": query, "format": "json", "language": options.language}
        if options.engines:
            params["engines"] = ",".join(options.engines)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(f"{self._base_url}/search", params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as exc:
            raise SearchBackendError(
                f"SearxNG request failed: {type(exc).__name__}"
            ) from exc
        except ValueError as exc:
            raise SearchBackendError("SearxNG returned a non-JSON payload") from exc
        return _parse_results(payload)


def _parse_results(payload: Any) -> list[SearchResult]:
    if not isinstance(payload, dict):
        raise SearchBackendError("SearxNG payload is not an object")
    rows = payload.get("results") or []
    if not isinstance(rows, list):
        raise SearchBackendError("SearxNG results field is not a list")

    results: list[SearchResult] = []
    for row in rows:
        if not isinstance(row, dict) or not row.get("title") or not row.get("url"):
            continue
        try:
            results.append(SearchResult.model_validate(row))
        except ValidationError:
            LOGGER.warning("Skipping malformed search result", extra={"url": row.get("url")})
    return results


def normalize_search_result(result: SearchResult) -> Document:
    content = result.content if result.content else result.title
    return Document(
        content=content,
        title=result.title,
        url=result.url,
        image=result.img_src or None,
    )
