"""
Tests for the deterministic fallback embedder.

Verifies:
✔ Fixed length for any input
✔ Same text → same vector
✔ Different text → different vector
✔ Unit L2 norm
"""

import math

import pytest

from compute import FallbackEmbedder
from compute.fallback import DEFAULT_DIMENSION


class TestFallbackShape:
    def test_default_dimension(self):
        vector = FallbackEmbedder().embed("hello")
        assert len(vector) == DEFAULT_DIMENSION == 768

    @pytest.mark.parametrize("dimension", [1, 7, 8, 9, 384, 1536])
    def test_dimension_is_exact(self, dimension):
        """Dimensions that are not a multiple of the hash block are truncated exactly."""
        vector = FallbackEmbedder(dimension=dimension).embed("some text")
        assert len(vector) == dimension

    def test_unit_norm(self):
        vector = FallbackEmbedder(dimension=64).embed("normalised")
        assert math.isclose(math.sqrt(sum(x * x for x in vector)), 1.0, rel_tol=1e-9)

    def test_empty_string_still_yields_vector(self):
        """The embedder itself is total; input validation happens upstream."""
        vector = FallbackEmbedder(dimension=16).embed("")
        assert len(vector) == 16

    def test_rejects_non_positive_dimension(self):
        with pytest.raises(ValueError):
            FallbackEmbedder(dimension=0)


class TestFallbackDeterminism:
    def test_same_text_same_vector(self):
        embedder = FallbackEmbedder(dimension=32)
        assert embedder.embed("repeatable") == embedder.embed("repeatable")

    def test_independent_instances_agree(self):
        """Purity: no per-instance state leaks into the output."""
        assert FallbackEmbedder(dimension=32).embed("x") == FallbackEmbedder(dimension=32).embed("x")

    def test_different_text_different_vector(self):
        embedder = FallbackEmbedder(dimension=32)
        assert embedder.embed("alpha") != embedder.embed("beta")

    def test_namespace_changes_output(self):
        a = FallbackEmbedder(dimension=32, namespace="one").embed("text")
        b = FallbackEmbedder(dimension=32, namespace="two").embed("text")
        assert a != b

    def test_unicode_text(self):
        embedder = FallbackEmbedder(dimension=32)
        assert embedder.embed("héllo wörld ✓") == embedder.embed("héllo wörld ✓")

    def test_embed_many_preserves_order(self):
        embedder = FallbackEmbedder(dimension=16)
        assert embedder.embed_many(["a", "b"]) == [embedder.embed("a"), embedder.embed("b")]
