"""
Vector helpers shared by the poller, the fallback embedder and the facade.
"""

import math
from numbers import Real
from typing import Any, List, Sequence

from .types import EmbeddingVector


def coerce_vector(raw: Any, dimension: int) -> EmbeddingVector:
    """
    Convert a raw network payload into a float vector of the expected length.

    Raises:
        ValueError: raw is not a flat numeric sequence of ``dimension`` items
    """
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise ValueError(f"expected a numeric sequence, got {type(raw).__name__}")

    vector: List[float] = []
    for value in raw:
        # bool is a Real subclass; a vector of flags is not an embedding
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ValueError(f"non-numeric component {value!r}")
        try:
            component = float(value)
        except OverflowError:
            raise ValueError(f"non-finite component (too large: {type(value).__name__})") from None
        if not math.isfinite(component):
            raise ValueError(f"non-finite component {value!r}")
        vector.append(component)

    if len(vector) != dimension:
        raise ValueError(f"dimension mismatch: expected {dimension}, got {len(vector)}")
    return vector


def l2_normalize(vector: Sequence[float]) -> EmbeddingVector:
    norm = math.sqrt(sum(x * x for x in vector)) or 1.0
    return [x / norm for x in vector]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors; 0.0 if either is all zeros."""
    if len(a) != len(b):
        raise ValueError("Vectors must have the same dimension")

    dot = 0.0
    mag_a = 0.0
    mag_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        mag_a += x * x
        mag_b += y * y

    if mag_a == 0 or mag_b == 0:
        return 0.0
    return dot / (math.sqrt(mag_a) * math.sqrt(mag_b))


def estimate_tokens(text: str) -> int:
    # ~4 characters per token for English text
    return math.ceil(len(text) / 4)
