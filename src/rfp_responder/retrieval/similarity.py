"""Vector similarity."""

from __future__ import annotations

from collections.abc import Sequence
from math import sqrt

from rfp_responder.errors import DimensionMismatch


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between `a` and `b`.

    Returns 0.0 when either vector has zero magnitude. Vectors of different
    lengths raise `DimensionMismatch`.
    """
    if len(a) != len(b):
        raise DimensionMismatch(expected=len(a), actual=len(b))
    numerator = sum(x * y for x, y in zip(a, b, strict=True))
    squared_a = sum(x * x for x in a)
    squared_b = sum(y * y for y in b)
    if squared_a == 0 or squared_b == 0:
        return 0.0
    score = numerator / sqrt(squared_a * squared_b)
    return max(-1.0, min(1.0, score))
