from __future__ import annotations


class NalandaError(Exception):
    pass


class SearchBackendError(NalandaError):
    pass


class EmbeddingError(NalandaError):
    pass


class SimilarityContractError(NalandaError, ValueError):
    pass


class UnknownFocusModeError(NalandaError, KeyError):
    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown focus mode: {self.key}"


class ConfigurationError(NalandaError):
    pass
