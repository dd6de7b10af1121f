"""
Compute usage statistics.

Process-wide counters for the facade, held in an explicit collector that
is injected into the facade rather than kept as module state.

Tracks:
- Requests resolved (network + fallback)
- Network successes
- Fallbacks used, by error type
- Average latency
- Last availability probe result

Thread-safe: every update takes the collector lock.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, Field

from .fallback import FALLBACK_DESCRIPTION

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NetworkStats(BaseModel):
    """Read-only snapshot of the gateway counters."""

    requests_submitted: int = 0
    successes: int = 0
    fallbacks_used: int = 0
    average_latency_ms: float = 0.0
    failures_by_type: Dict[str, int] = Field(default_factory=dict)
    last_fallback_reason: Optional[str] = None

    # Availability surface
    network_available: Optional[bool] = None   # None until first probe
    last_probe_at: Optional[datetime] = None
    fallback_enabled: bool = True
    fallback_description: str = FALLBACK_DESCRIPTION

    started_at: datetime = Field(default_factory=_utcnow)


class NetworkInfo(BaseModel):
    """Network-wide statistics as reported by the compute network."""

    connected: bool
    total_nodes: Optional[int] = None
    active_nodes: Optional[int] = None
    average_latency: Optional[float] = None
    total_tasks: Optional[int] = None
    queued_tasks: Optional[int] = None
    error: Optional[str] = None


class StatsCollector:
    """
    Lock-protected accumulator behind NetworkStats.

    Safe to share between asyncio tasks and worker threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._reset_unlocked()

    def _reset_unlocked(self) -> None:
        self._requests = 0
        self._successes = 0
        self._fallbacks = 0
        self._total_latency_ms = 0.0
        self._failures: Dict[str, int] = {}
        self._last_fallback_reason: Optional[str] = None
        self._network_available: Optional[bool] = None
        self._last_probe_at: Optional[datetime] = None
        self._started_at = _utcnow()

    def record_success(self, latency_ms: float) -> None:
        """Record a request served by the network."""
        with self._lock:
            self._requests += 1
            self._successes += 1
            self._total_latency_ms += latency_ms

    def record_fallback(self, error_type: str, reason: str, latency_ms: float) -> None:
        """Record a request served by the fallback embedder."""
        with self._lock:
            self._requests += 1
            self._fallbacks += 1
            self._total_latency_ms += latency_ms
            self._failures[error_type] = self._failures.get(error_type, 0) + 1
            self._last_fallback_reason = reason

    def record_probe(self, available: bool) -> None:
        with self._lock:
            self._network_available = available
            self._last_probe_at = _utcnow()

    def snapshot(self) -> NetworkStats:
        with self._lock:
            average = self._total_latency_ms / self._requests if self._requests else 0.0
            return NetworkStats(
                requests_submitted=self._requests,
                successes=self._successes,
                fallbacks_used=self._fallbacks,
                average_latency_ms=round(average, 3),
                failures_by_type=dict(self._failures),
                last_fallback_reason=self._last_fallback_reason,
                network_available=self._network_available,
                last_probe_at=self._last_probe_at,
                started_at=self._started_at,
            )

    def reset(self) -> None:
        """Zero all counters (for testing)."""
        with self._lock:
            self._reset_unlocked()
        logger.debug("Compute stats reset")
