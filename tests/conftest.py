from __future__ import annotations

import os

import pytest

ENV_PREFIXES = ("NALANDA_", "SEARXNG_")
API_KEY_ENV = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith(ENV_PREFIXES) or name in API_KEY_ENV:
            monkeypatch.delenv(name, raising=False)
