from __future__ import annotations

import math
from collections.abc import Sequence

from nalanda.errors import SimilarityContractError


def dot_product(left: Sequence[float], right: Sequence[float]) -> float:
    _require_same_length(left, right)
    return math.fsum(a * b for a, b in zip(left, right))


def cosine_similarity(left: Sequence[float], right: Sequence[float]) -> float:
    _require_same_length(left, right)
    left_norm = math.sqrt(math.fsum(value * value for value in left))
    right_norm = math.sqrt(math.fsum(value * value for value in right))
    if left_norm == 0.0 or right_norm == 0.0:
        return 0.0
    score = math.fsum(a * b for a, b in zip(left, right)) / (left_norm * right_norm)
    return max(-1.0, min(1.0, score))


def compute_similarity(
    left: Sequence[float],
    right: Sequence[float],
    measure: str = "cosine",
) -> float:
    if measure == "cosine":
        return cosine_similarity(left, right)
    if measure == "dot":
        return dot_product(left, right)
    raise ValueError(f"Unsupported similarity measure: {measure}")


def _require_same_length(left: Sequence[float], right: Sequence[float]) -> None:
    if len(left) != len(right):
        raise SimilarityContractError(
            f"Vector length mismatch: {len(left)} != {len(right)}"
        )
