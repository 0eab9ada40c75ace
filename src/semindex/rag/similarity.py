"""Cosine similarity between embedding vectors."""

from __future__ import annotations

import math
from collections.abc import Sequence

from semindex.errors import DimensionMismatchError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``, a value in [-1, 1].

    Similarity against a zero vector is defined as 0.0 rather than NaN.
    Inputs are expected to be finite; NaN/Inf are not special-cased.

    Raises:
        DimensionMismatchError: If *a* and *b* differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
