from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import FastAPI, Header, HTTPException
from fastapi.responses import RedirectResponse, StreamingResponse

from nalanda.config import configure_logging, load_config, with_runtime_gemini_key
from nalanda.errors import ConfigurationError, UnknownFocusModeError
from nalanda.focus_modes import get_focus_mode, list_focus_modes
from nalanda.llm.providers import build_chat_model
from nalanda.models import ChatRequest, FocusModeSummary, PipelineEvent
from nalanda.pipeline import stream_answer
from nalanda.retrieval.embeddings import build_embedding_provider
from nalanda.retrieval.search import SearxngSearchClient

configure_logging(load_config().log_level)

app = FastAPI(title="Nalanda", version="0.1.0")


@app.get("/")
async def root() -> RedirectResponse:
    return RedirectResponse(url="/docs", status_code=307)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


@app.get("/api/focus-modes")
async def focus_modes() -> list[FocusModeSummary]:
    return list_focus_modes()


@app.post("/api/chat")
async def chat(
    payload: ChatRequest,
    x_gemini_api_key: str | None = Header(default=None, alias="X-Gemini-Api-Key"),
) -> StreamingResponse:
    config = with_runtime_gemini_key(load_config(), x_gemini_api_key)
    try:
        focus_mode = get_focus_mode(payload.focus_mode or config.default_focus_mode)
    except UnknownFocusModeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        chat_model = build_chat_model(config)
        embedding_provider = build_embedding_provider(config)
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    events = stream_answer(
        payload.query,
        payload.history,
        chat_model=chat_model,
        embedding_provider=embedding_provider,
        search_backend=SearxngSearchClient(
            config.searxng_api_url,
            timeout_seconds=config.search_timeout_seconds,
        ),
        focus_mode=focus_mode,
        search_language=config.search_language,
        rerank_settings=config.rerank_settings,
    )
    return StreamingResponse(
        _ndjson_lines(events),
        media_type="application/x-ndjson",
    )


async def _ndjson_lines(events: AsyncIterator[PipelineEvent]) -> AsyncIterator[str]:
    async for event in events:
        yield event.model_dump_json(exclude_none=True) + "\n"
