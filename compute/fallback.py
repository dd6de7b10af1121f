"""
Deterministic fallback embedder.

Used only when the compute network path fails. It keeps the gateway
answering with a vector of the same shape as the network would return,
so callers never need to branch on which path served them.

Properties:
- deterministic: same text → same vector
- pure: no network, no state, no randomness
- fixed length: matches the configured network dimension
- normalised to unit length

It does NOT approximate semantic similarity. Vectors produced here are a
degraded stand-in and are reported as such through NetworkStats
(fallback_description) and EmbeddingResponse.source == "fallback".
"""

import hashlib
import struct
from typing import List

from .types import EmbeddingVector
from .vectors import l2_normalize

DEFAULT_DIMENSION = 768
FALLBACK_DESCRIPTION = (
    "Deterministic hash-derived vectors computed locally when the compute "
    "network is unavailable; same dimension as network embeddings but not "
    "semantically comparable to them."
)

# sha256 → 32 bytes → 8 unsigned 32-bit words per block
_WORD = struct.Struct(">8I")
_UINT32_MAX = float(2**32 - 1)


class FallbackEmbedder:
    """
    Hash-stream embedder.

    Each block of eight components is sha256(namespace | block index | text);
    each 32-bit word is mapped into [-1, 1] and the vector is L2-normalised.
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION, namespace: str = "compute-fallback-v1"):
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self.dimension = dimension
        self.namespace = namespace.encode("utf-8")

    def embed(self, text: str) -> EmbeddingVector:
        """
        Compute the fallback vector for ``text``.

        Args:
            text: Input text (any string, including empty)

        Returns:
            List of ``dimension`` floats with unit L2 norm
        """
        payload = text.encode("utf-8")
        components: List[float] = []
        block = 0

        while len(components) < self.dimension:
            digest = hashlib.sha256(
                self.namespace + b"|" + block.to_bytes(4, "big") + b"|" + payload
            ).digest()
            for word in _WORD.unpack(digest):
                components.append((word / _UINT32_MAX) * 2.0 - 1.0)
            block += 1

        return l2_normalize(components[: self.dimension])

    def embed_many(self, texts: List[str]) -> List[EmbeddingVector]:
        return [self.embed(text) for text in texts]
