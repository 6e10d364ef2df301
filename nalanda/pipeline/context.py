from __future__ import annotations

from collections.abc import Sequence

from nalanda.models import Document


def format_context(documents: Sequence[Document]) -> str:
    return "\n".join(
        f"{index}. {document.content}"
        for index, document in enumerate(documents, start=1)
    )
