from __future__ import annotations

from dataclasses import dataclass

from nalanda.errors import UnknownFocusModeError
from nalanda.models import FocusModeSummary
from nalanda.prompts import (
    COLLEGE_FINDER_RESPONSE_PROMPT,
    COLLEGE_FINDER_RETRIEVER_PROMPT,
    RESUME_BUILDER_RESPONSE_PROMPT,
    RESUME_BUILDER_RETRIEVER_PROMPT,
    SOP_BUILDER_RESPONSE_PROMPT,
)


@dataclass(frozen=True)
class FocusMode:
    key: str
    title: str
    response_prompt: str
    engine: str | None = None
    retriever_prompt: str | None = None
    rerank: bool = True

    @property
    def search(self) -> bool:
        return self.engine is not None and self.retriever_prompt is not None

    def summary(self) -> FocusModeSummary:
        return FocusModeSummary(
            key=self.key,
            title=self.title,
            engine=self.engine,
            search=self.search,
            rerank=self.search and self.rerank,
        )


COLLEGE_FINDER = FocusMode(
    key="college_finder",
    title="College Finder",
    engine="reddit",
    retriever_prompt=COLLEGE_FINDER_RETRIEVER_PROMPT,
    response_prompt=COLLEGE_FINDER_RESPONSE_PROMPT,
    rerank=True,
)

RESUME_BUILDER = FocusMode(
    key="resume_builder",
    title="Resume Builder",
    engine="wolframalpha",
    retriever_prompt=RESUME_BUILDER_RETRIEVER_PROMPT,
    response_prompt=RESUME_BUILDER_RESPONSE_PROMPT,
    rerank=False,
)

SOP_BUILDER = FocusMode(
    key="sop_builder",
    title="SOP Builder",
    response_prompt=SOP_BUILDER_RESPONSE_PROMPT,
    rerank=False,
)

FOCUS_MODES: dict[str, FocusMode] = {
    mode.key: mode for mode in (COLLEGE_FINDER, RESUME_BUILDER, SOP_BUILDER)
}


def get_focus_mode(key: str) -> FocusMode:
    normalized = key.strip().lower()
    try:
        return FOCUS_MODES[normalized]
    except KeyError as exc:
        raise UnknownFocusModeError(key) from exc


def list_focus_modes() -> list[FocusModeSummary]:
    return [mode.summary() for mode in FOCUS_MODES.values()]
