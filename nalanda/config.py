from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace

SIMILARITY_MEASURES = {"cosine", "dot"}
EMBEDDING_BACKENDS = {"google", "deterministic"}


@dataclass(frozen=True)
class RerankSettings:
    similarity_threshold: float = 0.3
    max_sources: int = 15
    similarity_measure: str = "cosine"


@dataclass(frozen=True)
class AppConfig:
    gemini_api_key: str | None
    chat_model: str
    chat_temperature: float
    embedding_backend: str
    embedding_model: str
    embedding_dimensions: int
    searxng_api_url: str
    search_language: str
    search_timeout_seconds: float
    similarity_measure: str
    similarity_threshold: float
    max_sources: int
    default_focus_mode: str
    log_level: str

    @property
    def rerank_settings(self) -> RerankSettings:
        return RerankSettings(
            similarity_threshold=self.similarity_threshold,
            max_sources=self.max_sources,
            similarity_measure=self.similarity_measure,
        )


def _read_optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if not value:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _read_str_env(name: str, default: str) -> str:
    return _read_optional_env(name) or default


def _read_choice_env(name: str, choices: set[str], default: str) -> str:
    value = _read_optional_env(name)
    if value is None:
        return default
    normalized = value.lower()
    return normalized if normalized in choices else default


def _read_int_env(name: str, default: int) -> int:
    value = _read_optional_env(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_float_env(name: str, default: float) -> float:
    value = _read_optional_env(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if parsed < 0:
        return default
    if parsed > 1:
        return 1.0
    return parsed


def _read_positive_float_env(name: str, default: float) -> float:
    value = _read_optional_env(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_config() -> AppConfig:
    return AppConfig(
        gemini_api_key=_read_optional_env("GEMINI_API_KEY")
        or _read_optional_env("GOOGLE_API_KEY"),
        chat_model=_read_str_env("NALANDA_CHAT_MODEL", "gemini-2.5-flash"),
        chat_temperature=_read_float_env("NALANDA_CHAT_TEMPERATURE", default=0.7),
        embedding_backend=_read_choice_env(
            "NALANDA_EMBEDDING_BACKEND", EMBEDDING_BACKENDS, default="google"
        ),
        embedding_model=_read_str_env(
            "NALANDA_EMBEDDING_MODEL", "models/text-embedding-004"
        ),
        embedding_dimensions=_read_int_env(
            "NALANDA_EMBEDDING_DIMENSIONS", default=768
        ),
        searxng_api_url=_read_str_env(
            "SEARXNG_API_URL", "http://localhost:8080"
        ).rstrip("/"),
        search_language=_read_str_env("NALANDA_SEARCH_LANGUAGE", "en"),
        search_timeout_seconds=_read_positive_float_env(
            "NALANDA_SEARCH_TIMEOUT_SECONDS", default=10.0
        ),
        similarity_measure=_read_choice_env(
            "NALANDA_SIMILARITY_MEASURE", SIMILARITY_MEASURES, default="cosine"
        ),
        similarity_threshold=_read_float_env(
            "NALANDA_SIMILARITY_THRESHOLD", default=0.3
        ),
        max_sources=_read_int_env("NALANDA_MAX_SOURCES", default=15),
        default_focus_mode=_read_str_env(
            "NALANDA_DEFAULT_FOCUS_MODE", "college_finder"
        ),
        log_level=_read_str_env("NALANDA_LOG_LEVEL", "INFO").upper(),
    )


def with_runtime_gemini_key(
    config: AppConfig,
    runtime_gemini_api_key: str | None,
) -> AppConfig:
    if runtime_gemini_api_key is None:
        return config
    key = runtime_gemini_api_key.strip()
    if not key:
        return config
    return replace(config, gemini_api_key=key)


def configure_logging(level: str) -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
