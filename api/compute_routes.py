"""
Compute HTTP routes.

Thin layer over ComputeFacade:
  POST /compute/embeddings        one text → one embedding
  POST /compute/embeddings/batch  many texts → embeddings, input order kept
  POST /compute/similarity        cosine similarity of two texts
  GET  /compute/availability      network liveness probe (never errors)
  GET  /compute/stats             gateway counters
  GET  /compute/network           network-wide statistics
  GET  /compute/config            non-secret configuration

InvalidInput → 400. Network failures never surface here: the facade
answers with fallback vectors instead.

Every request carries a TraceMetadata; the trace id is taken from the
X-Request-ID header when present.
"""

import logging
import uuid
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from compute import ComputeFacade, EmbeddingResponse, InvalidInput, NetworkInfo, NetworkStats
from infra import bootstrap_infrastructure
from tracing import TraceMetadata

from .schemas import (
    AvailabilityResult,
    BatchEmbeddingRequest,
    BatchEmbeddingResult,
    EmbeddingRequest,
    EmbeddingResult,
    SimilarityRequest,
    SimilarityResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/compute", tags=["compute"])

REQUEST_ID_HEADER = "X-Request-ID"


def get_compute_facade() -> ComputeFacade:
    """Dependency: process-wide facade (overridden in tests)."""
    return bootstrap_infrastructure().get_facade()


def get_trace_metadata(request: Request) -> TraceMetadata:
    """Dependency: trace identity for one inbound request."""
    request_id = request.headers.get(REQUEST_ID_HEADER)
    return TraceMetadata(
        trace_id=request_id or str(uuid.uuid4()),
        request_id=request_id,
        caller=request.client.host if request.client else None,
    )


def _to_result(response: EmbeddingResponse) -> EmbeddingResult:
    data = asdict(response)
    data.pop("metadata", None)
    return EmbeddingResult(**data)


@router.post("/embeddings", response_model=EmbeddingResult)
async def create_embedding(
    request: EmbeddingRequest,
    facade: ComputeFacade = Depends(get_compute_facade),
    trace_metadata: TraceMetadata = Depends(get_trace_metadata),
):
    """Embed one text. Served by the network or, on failure, by the fallback."""
    try:
        response = await facade.embed_text(request.text, request.model, trace_metadata)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)
    return _to_result(response)


@router.post("/embeddings/batch", response_model=BatchEmbeddingResult)
async def create_batch_embeddings(
    request: BatchEmbeddingRequest,
    facade: ComputeFacade = Depends(get_compute_facade),
    trace_metadata: TraceMetadata = Depends(get_trace_metadata),
):
    """Embed many texts; the i-th result belongs to the i-th text."""
    try:
        responses: List[EmbeddingResponse] = await facade.embed_batch(
            request.texts, request.model, trace_metadata
        )
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)

    results = [_to_result(r) for r in responses]
    return BatchEmbeddingResult(
        embeddings=results,
        count=len(results),
        fallbacks=sum(1 for r in results if r.source == "fallback"),
    )


@router.post("/similarity", response_model=SimilarityResult)
async def similarity(
    request: SimilarityRequest,
    facade: ComputeFacade = Depends(get_compute_facade),
    trace_metadata: TraceMetadata = Depends(get_trace_metadata),
):
    """Cosine similarity between two texts' embeddings."""
    try:
        value, responses = await facade.compare_texts(
            request.text_a, request.text_b, request.model, trace_metadata
        )
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)

    return SimilarityResult(similarity=value, sources=[r.source for r in responses])


@router.get("/availability", response_model=AvailabilityResult)
async def availability(
    facade: ComputeFacade = Depends(get_compute_facade),
    trace_metadata: TraceMetadata = Depends(get_trace_metadata),
):
    """Compute network liveness. Always 200; unreachable reads as false."""
    return AvailabilityResult(available=await facade.check_network_availability(trace_metadata))


@router.get("/stats", response_model=NetworkStats)
async def stats(facade: ComputeFacade = Depends(get_compute_facade)):
    """Gateway counters, including how many requests used the fallback."""
    return facade.get_stats()


@router.get("/network", response_model=NetworkInfo)
async def network(facade: ComputeFacade = Depends(get_compute_facade)):
    """Network-wide statistics; connected=false when unreachable."""
    return await facade.get_network_stats()


@router.get("/config")
async def compute_config():
    """Non-secret compute configuration."""
    return bootstrap_infrastructure().config.describe()
