"""
Request/response schemas for the compute HTTP API.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class EmbeddingRequest(BaseModel):
    text: str
    model: Optional[str] = None


class BatchEmbeddingRequest(BaseModel):
    texts: List[str]
    model: Optional[str] = None


class SimilarityRequest(BaseModel):
    text_a: str
    text_b: str
    model: Optional[str] = None


class EmbeddingResult(BaseModel):
    """One embedding, tagged with the path that produced it."""

    vector: List[float]
    dimension: int
    model: str
    tokens: int
    source: Literal["network", "fallback"]
    task_id: Optional[str] = None
    error_type: Optional[str] = None


class BatchEmbeddingResult(BaseModel):
    embeddings: List[EmbeddingResult]
    count: int
    fallbacks: int = Field(description="Items served by the local fallback embedder")


class SimilarityResult(BaseModel):
    similarity: float
    sources: List[Literal["network", "fallback"]]


class AvailabilityResult(BaseModel):
    available: bool
