"""
Infrastructure configuration system.

Environment-based backend selection with sensible defaults.
Set COMPUTE_BACKEND=stub to run fully offline.
"""

import logging
import os
from dataclasses import dataclass
from typing import Literal, Optional

from compute import (
    ComputeBackend,
    ComputeFacade,
    FallbackEmbedder,
    NetworkComputeBackend,
    ResultPoller,
    StatsCollector,
    StubComputeBackend,
    TaskSubmitter,
)
from compute.network import DEFAULT_API_URL
from compute.submitter import DEFAULT_MODEL
from tracing import Tracer, create_tracer

logger = logging.getLogger(__name__)

ComputeBackendType = Literal["stub", "network"]
BatchModeType = Literal["per_item", "single_task"]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using {default}")
        return default


@dataclass
class ComputeConfig:
    """Compute gateway configuration from environment."""

    # Backend
    compute_backend: ComputeBackendType
    compute_api_url: str
    default_model: str
    dimension: int

    # Polling
    poll_interval_s: float
    max_poll_attempts: int

    # Timeouts
    submit_timeout_s: float
    batch_submit_timeout_s: float
    status_timeout_s: float
    health_timeout_s: float
    stats_timeout_s: float

    # Request identity
    requester_id: str
    signing_key: str

    # Batching
    batch_mode: BatchModeType
    max_concurrency: int

    # Observability
    tracer_backend: str

    @classmethod
    def from_env(cls) -> "ComputeConfig":
        """
        Load configuration from environment variables.

        Defaults target the public compute network with a 768-dimension
        model, 15 polls 2 s apart, and unsigned requests.
        """
        return cls(
            compute_backend=os.getenv("COMPUTE_BACKEND", "network").lower(),  # type: ignore
            compute_api_url=os.getenv("COMPUTE_API_URL", DEFAULT_API_URL),
            default_model=os.getenv("COMPUTE_DEFAULT_MODEL", DEFAULT_MODEL),
            dimension=_env_int("VECTOR_DIMENSION", 768),

            poll_interval_s=_env_float("COMPUTE_POLL_INTERVAL_S", 2.0),
            max_poll_attempts=_env_int("COMPUTE_MAX_POLL_ATTEMPTS", 15),

            submit_timeout_s=_env_float("COMPUTE_SUBMIT_TIMEOUT_S", 30.0),
            batch_submit_timeout_s=_env_float("COMPUTE_BATCH_SUBMIT_TIMEOUT_S", 60.0),
            status_timeout_s=_env_float("COMPUTE_STATUS_TIMEOUT_S", 5.0),
            health_timeout_s=_env_float("COMPUTE_HEALTH_TIMEOUT_S", 5.0),
            stats_timeout_s=_env_float("COMPUTE_STATS_TIMEOUT_S", 10.0),

            requester_id=os.getenv("COMPUTE_REQUESTER_ID", ""),
            signing_key=os.getenv("COMPUTE_SIGNING_KEY", ""),

            batch_mode=os.getenv("COMPUTE_BATCH_MODE", "per_item").lower(),  # type: ignore
            max_concurrency=_env_int("COMPUTE_MAX_CONCURRENCY", 4),

            tracer_backend=os.getenv("TRACER_BACKEND", "noop").lower(),
        )

    def create_backend(self) -> ComputeBackend:
        """Create compute backend instance based on configuration."""
        if self.compute_backend == "stub":
            return StubComputeBackend(dimension=self.dimension)
        if self.compute_backend != "network":
            logger.warning(f"Unknown COMPUTE_BACKEND '{self.compute_backend}', using network")
        return NetworkComputeBackend(
            base_url=self.compute_api_url,
            status_timeout_s=self.status_timeout_s,
            health_timeout_s=self.health_timeout_s,
            stats_timeout_s=self.stats_timeout_s,
        )

    def create_tracer(self) -> Tracer:
        return create_tracer(self.tracer_backend)

    def create_facade(
        self,
        backend: Optional[ComputeBackend] = None,
        stats: Optional[StatsCollector] = None,
        tracer: Optional[Tracer] = None,
    ) -> ComputeFacade:
        """Wire submitter, poller, fallback and stats around one backend."""
        backend = backend or self.create_backend()
        batch_mode = self.batch_mode if self.batch_mode in ("per_item", "single_task") else "per_item"

        return ComputeFacade(
            submitter=TaskSubmitter(
                backend,
                default_model=self.default_model,
                requester=self.requester_id,
                signing_key=self.signing_key,
                submit_timeout_s=self.submit_timeout_s,
                batch_submit_timeout_s=self.batch_submit_timeout_s,
            ),
            poller=ResultPoller(
                backend,
                dimension=self.dimension,
                interval_s=self.poll_interval_s,
                max_attempts=max(1, self.max_poll_attempts),
            ),
            fallback=FallbackEmbedder(dimension=self.dimension),
            stats=stats or StatsCollector(),
            batch_mode=batch_mode,  # type: ignore
            max_concurrency=self.max_concurrency,
            tracer=tracer or self.create_tracer(),
        )

    def describe(self) -> dict:
        """Non-secret view of the configuration for health/debug endpoints."""
        return {
            "compute_backend": self.compute_backend,
            "compute_api_url": self.compute_api_url,
            "default_model": self.default_model,
            "dimension": self.dimension,
            "poll_interval_s": self.poll_interval_s,
            "max_poll_attempts": self.max_poll_attempts,
            "batch_mode": self.batch_mode,
            "max_concurrency": self.max_concurrency,
            "signed_requests": bool(self.signing_key),
            "tracer_backend": self.tracer_backend,
        }


def get_config() -> ComputeConfig:
    """Get compute configuration from the current environment."""
    return ComputeConfig.from_env()
