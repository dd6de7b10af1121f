"""
Compute network boundary for embedding generation.

This package submits embedding tasks to the external compute network,
polls them to completion, and falls back to a deterministic local
embedder whenever the network path fails.

Supported backends:
- StubComputeBackend: Deterministic in-process fake network (CI/tests)
- NetworkComputeBackend: HTTP client for the compute network API

Example usage:
    from compute import (
        ComputeFacade, FallbackEmbedder, ResultPoller,
        StubComputeBackend, TaskSubmitter,
    )

    backend = StubComputeBackend(dimension=768)
    facade = ComputeFacade(
        TaskSubmitter(backend),
        ResultPoller(backend, dimension=768, interval_s=0.0),
        FallbackEmbedder(dimension=768),
    )
    vector = await facade.generate_embedding("Hello, world!")
"""

from .errors import ComputeError, InvalidInput, NetworkUnavailable, TaskFailed, PollTimeout
from .types import (
    ComputeTask,
    EmbeddingResponse,
    EmbeddingVector,
    NetworkOutcome,
    TaskStatus,
    TaskStatusReport,
)
from .base import ComputeBackend
from .stub import StubComputeBackend
from .network import NetworkComputeBackend
from .fallback import FallbackEmbedder
from .submitter import TaskSubmitter
from .poller import ResultPoller
from .stats import NetworkInfo, NetworkStats, StatsCollector
from .facade import ComputeFacade

__all__ = [
    "ComputeError",
    "InvalidInput",
    "NetworkUnavailable",
    "TaskFailed",
    "PollTimeout",
    "ComputeTask",
    "EmbeddingResponse",
    "EmbeddingVector",
    "NetworkOutcome",
    "TaskStatus",
    "TaskStatusReport",
    "ComputeBackend",
    "StubComputeBackend",
    "NetworkComputeBackend",
    "FallbackEmbedder",
    "TaskSubmitter",
    "ResultPoller",
    "NetworkInfo",
    "NetworkStats",
    "StatsCollector",
    "ComputeFacade",
]
