"""
Compute facade.

Orchestrates Submitter → Poller → (Fallback on failure) and exposes the
availability and statistics surfaces.

Guarantees:
- Embedding entry points always return vectors of ``dimension`` floats
- InvalidInput is raised before any network call and is never swallowed
- Network failures (NetworkUnavailable, TaskFailed, PollTimeout) become a
  failure outcome; only that outcome invokes the fallback embedder
- No retries beyond the poller's budget
- Availability and network-stats probes never raise
- Batch output order == input order; items resolve independently
"""

import asyncio
import concurrent.futures
import logging
import time
from typing import Any, Coroutine, List, Literal, Optional, Tuple, TypeVar

from .base import ComputeBackend
from .errors import ComputeError, InvalidInput
from .fallback import FallbackEmbedder
from .poller import ResultPoller
from .stats import NetworkInfo, NetworkStats, StatsCollector
from .submitter import TaskSubmitter, validate_text, validate_texts
from .types import EmbeddingResponse, EmbeddingVector, NetworkOutcome, TaskInput
from .vectors import cosine_similarity, estimate_tokens

logger = logging.getLogger(__name__)

BatchMode = Literal["per_item", "single_task"]
T = TypeVar("T")


class ComputeFacade:
    """
    Embedding gateway with unconditional local fallback.

    Usage:
        facade = ComputeFacade(submitter, poller, FallbackEmbedder(768), StatsCollector())
        vector = await facade.generate_embedding("hello world")
        stats  = facade.get_stats()

    Args:
        submitter: Task submitter (owns the backend)
        poller: Result poller
        fallback: Local embedder used on any network failure
        stats: Shared stats collector (a fresh one when omitted)
        batch_mode: "per_item" (one task per text) or "single_task"
        max_concurrency: Concurrent items per batch in per_item mode
        tracer: Optional tracer; events are emitted only with trace_metadata
    """

    def __init__(
        self,
        submitter: TaskSubmitter,
        poller: ResultPoller,
        fallback: FallbackEmbedder,
        stats: Optional[StatsCollector] = None,
        batch_mode: BatchMode = "per_item",
        max_concurrency: int = 4,
        tracer: Optional[Any] = None,
    ):
        if fallback.dimension != poller.dimension:
            raise ValueError(
                f"fallback dimension {fallback.dimension} != network dimension {poller.dimension}"
            )
        if batch_mode not in ("per_item", "single_task"):
            raise ValueError(f"unknown batch_mode '{batch_mode}'")

        self.submitter = submitter
        self.poller = poller
        self.fallback = fallback
        self.stats = stats or StatsCollector()
        self.batch_mode = batch_mode
        self.max_concurrency = max(1, max_concurrency)
        self.tracer = tracer

    @property
    def backend(self) -> ComputeBackend:
        return self.submitter.backend

    @property
    def dimension(self) -> int:
        return self.poller.dimension

    @property
    def default_model(self) -> str:
        return self.submitter.default_model

    # ──────────────────────────────────────────────────────────
    # EMBEDDINGS
    # ──────────────────────────────────────────────────────────

    async def generate_embedding(
        self,
        text: str,
        model: Optional[str] = None,
        trace_metadata: Optional[Any] = None,
    ) -> EmbeddingVector:
        """
        Embed one text via the network, falling back locally on failure.

        Raises:
            InvalidInput: text is empty (before any network call)
        """
        response = await self.embed_text(text, model, trace_metadata)
        return response.vector

    async def embed_text(
        self,
        text: str,
        model: Optional[str] = None,
        trace_metadata: Optional[Any] = None,
    ) -> EmbeddingResponse:
        """Like generate_embedding, with source/model/tokens metadata."""
        validate_text(text)
        return await self._embed_validated(text, model or self.default_model, trace_metadata)

    async def generate_batch_embeddings(
        self,
        texts: List[str],
        model: Optional[str] = None,
        trace_metadata: Optional[Any] = None,
    ) -> List[EmbeddingVector]:
        """
        Embed many texts; the i-th vector belongs to the i-th text.

        Raises:
            InvalidInput: list empty or any item empty (before any network call)
        """
        responses = await self.embed_batch(texts, model, trace_metadata)
        return [response.vector for response in responses]

    async def embed_batch(
        self,
        texts: List[str],
        model: Optional[str] = None,
        trace_metadata: Optional[Any] = None,
    ) -> List[EmbeddingResponse]:
        texts = validate_texts(texts)
        model_name = model or self.default_model

        if self.batch_mode == "single_task":
            return await self._embed_batch_single_task(texts, model_name, trace_metadata)

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def resolve_one(text: str) -> EmbeddingResponse:
            async with semaphore:
                return await self._embed_validated(text, model_name, trace_metadata)

        return list(await asyncio.gather(*(resolve_one(text) for text in texts)))

    async def cosine_similarity(
        self,
        text_a: str,
        text_b: str,
        model: Optional[str] = None,
        trace_metadata: Optional[Any] = None,
    ) -> float:
        """Cosine similarity between the embeddings of two texts."""
        similarity, _ = await self.compare_texts(text_a, text_b, model, trace_metadata)
        return similarity

    async def compare_texts(
        self,
        text_a: str,
        text_b: str,
        model: Optional[str] = None,
        trace_metadata: Optional[Any] = None,
    ) -> Tuple[float, List[EmbeddingResponse]]:
        """Like cosine_similarity, also returning both embedding responses."""
        responses = await self.embed_batch([text_a, text_b], model, trace_metadata)
        if responses[0].source != responses[1].source:
            logger.info("Similarity computed across network and fallback vectors")
        return cosine_similarity(responses[0].vector, responses[1].vector), responses

    # ──────────────────────────────────────────────────────────
    # PROBES & STATS
    # ──────────────────────────────────────────────────────────

    async def check_network_availability(self, trace_metadata: Optional[Any] = None) -> bool:
        """Single cheap health request. Returns False on any error, never raises."""
        try:
            available = await self.backend.health()
        except Exception as e:
            logger.warning(f"Compute network health check failed: {type(e).__name__}: {e}")
            available = False

        self.stats.record_probe(available)
        self._emit_event("compute_network_probe", {"available": available}, trace_metadata)
        return available

    async def get_network_stats(self) -> NetworkInfo:
        """Network-wide statistics. Returns connected=False on any error."""
        try:
            data = await self.backend.network_stats()
            return NetworkInfo(
                connected=True,
                total_nodes=data.get("total_nodes"),
                active_nodes=data.get("active_nodes"),
                average_latency=data.get("avg_latency"),
                total_tasks=data.get("total_tasks"),
                queued_tasks=data.get("queued_tasks"),
            )
        except Exception as e:
            logger.warning(f"Failed to get compute network stats: {e}")
            return NetworkInfo(connected=False, error=str(e))

    def get_stats(self) -> NetworkStats:
        return self.stats.snapshot()

    # ──────────────────────────────────────────────────────────
    # SYNC WRAPPERS
    # ──────────────────────────────────────────────────────────

    def generate_embedding_sync(self, text: str, model: Optional[str] = None) -> EmbeddingVector:
        return self._run_sync(self.generate_embedding(text, model))

    def generate_batch_embeddings_sync(
        self, texts: List[str], model: Optional[str] = None
    ) -> List[EmbeddingVector]:
        return self._run_sync(self.generate_batch_embeddings(texts, model))

    def check_network_availability_sync(self) -> bool:
        return self._run_sync(self.check_network_availability())

    @staticmethod
    def _run_sync(coro: Coroutine[Any, Any, T]) -> T:
        """Run a coroutine to completion from sync code, inside or outside a loop."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()

    # ──────────────────────────────────────────────────────────
    # INTERNALS
    # ──────────────────────────────────────────────────────────

    async def _embed_validated(
        self, text: str, model: str, trace_metadata: Optional[Any]
    ) -> EmbeddingResponse:
        started = time.perf_counter()
        span = self._start_span("compute_request", {"model": model, "batch": False}, trace_metadata)

        outcome = await self._run_network(text, model, trace_metadata)
        response = self._resolve(text, model, outcome, 0, started, trace_metadata)

        self._end_span(span, response)
        return response

    async def _embed_batch_single_task(
        self, texts: List[str], model: str, trace_metadata: Optional[Any]
    ) -> List[EmbeddingResponse]:
        started = time.perf_counter()
        span = self._start_span(
            "compute_request", {"model": model, "batch": True, "size": len(texts)}, trace_metadata
        )

        outcome = await self._run_network(texts, model, trace_metadata)
        responses = [
            self._resolve(text, model, outcome, index, started, trace_metadata)
            for index, text in enumerate(texts)
        ]

        self._end_span(span, responses[0])
        return responses

    async def _run_network(
        self, input: TaskInput, model: str, trace_metadata: Optional[Any]
    ) -> NetworkOutcome:
        """Submit and poll; convert the compute error taxonomy into a tagged outcome."""
        try:
            task = await self.submitter.submit(input, model)
            self._emit_event(
                "compute_task_submitted", {"task_id": task.id, "model": model}, trace_metadata
            )
            task = await self.poller.poll(task)

        except InvalidInput:
            raise

        except ComputeError as e:
            return NetworkOutcome.failed(e)

        self._emit_event(
            "compute_task_completed",
            {"task_id": task.id, "attempts": task.attempts},
            trace_metadata,
        )
        vectors = task.result if task.is_batch else [task.result]
        return NetworkOutcome.succeeded(vectors, task.id)

    def _resolve(
        self,
        text: str,
        model: str,
        outcome: NetworkOutcome,
        index: int,
        started: float,
        trace_metadata: Optional[Any],
    ) -> EmbeddingResponse:
        """Turn the outcome for one item into a response, falling back on failure."""
        latency_ms = (time.perf_counter() - started) * 1000

        if outcome.status == "success":
            self.stats.record_success(latency_ms)
            return EmbeddingResponse(
                vector=outcome.vectors[index],
                dimension=self.dimension,
                model=model,
                tokens=estimate_tokens(text),
                source="network",
                task_id=outcome.task_id,
            )

        error = outcome.error
        error_type = error.error_type if error else "compute_error"
        reason = str(error) if error else "unknown failure"

        logger.warning(f"Compute network path failed ({reason}); using fallback embedding")
        self.stats.record_fallback(error_type, reason, latency_ms)
        self._emit_event(
            "compute_fallback_used",
            {"error_type": error_type, "task_id": outcome.task_id},
            trace_metadata,
        )

        return EmbeddingResponse(
            vector=self.fallback.embed(text),
            dimension=self.dimension,
            model=model,
            tokens=estimate_tokens(text),
            source="fallback",
            task_id=outcome.task_id,
            error_type=error_type,
        )

    # ──────────────────────────────────────────────────────────
    # TRACING HELPERS
    # ──────────────────────────────────────────────────────────

    def _emit_event(self, event_name: str, metadata: dict, trace_metadata: Optional[Any]) -> None:
        """Safely emit a trace event. Never raises."""
        if self.tracer is None or trace_metadata is None:
            return
        try:
            self.tracer.record_event(event_name, metadata, trace_metadata)
        except Exception:
            pass

    def _start_span(self, name: str, metadata: dict, trace_metadata: Optional[Any]) -> Optional[Any]:
        if self.tracer is None or trace_metadata is None:
            return None
        try:
            return self.tracer.start_span(name, metadata, trace_metadata)
        except Exception:
            return None

    def _end_span(self, span: Optional[Any], response: EmbeddingResponse) -> None:
        if self.tracer is None or span is None:
            return
        try:
            self.tracer.end_span(
                span,
                "success" if response.source == "network" else "fallback",
                {"source": response.source, "error_type": response.error_type},
            )
        except Exception:
            pass
