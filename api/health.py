"""
Health check endpoints for deployment readiness.

Provides:
- /health/live: Liveness probe (gateway is running)
- /health/ready: Readiness probe (gateway can serve embeddings)

Both endpoints reflect gateway state WITHOUT calling the compute network.
Network reachability is reported separately by /compute/availability.
"""

import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class HealthStatus:
    """Health status response."""

    status: str  # "healthy", "unhealthy"
    timestamp: str
    ready: bool
    uptime_seconds: float
    mode: str  # "stub", "network"
    message: str
    metadata: Dict[str, Any]


class HealthChecker:
    """
    Health checker for gateway readiness.

    Invariant: Health checks do NOT call the compute network.
    The fallback embedder guarantees service even when it is down.
    """

    def __init__(self, start_time: float):
        """Initialize health checker."""
        self.start_time = start_time

    def check_live(self, mode: str) -> HealthStatus:
        """
        Liveness probe: Is the gateway process running?

        Always returns healthy if this endpoint responds.
        """
        return HealthStatus(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            ready=True,
            uptime_seconds=time.time() - self.start_time,
            mode=mode,
            message="Gateway process is running",
            metadata={},
        )

    def check_ready(self, mode: str, bootstrap_error: Optional[str] = None) -> HealthStatus:
        """
        Readiness probe: can the gateway serve embedding requests?

        Ready once the compute facade is bootstrapped. NOT blocked by
        compute network unavailability.
        """
        ready = bootstrap_error is None
        return HealthStatus(
            status="healthy" if ready else "unhealthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            ready=ready,
            uptime_seconds=time.time() - self.start_time,
            mode=mode,
            message="Compute facade initialized" if ready else f"Bootstrap failed: {bootstrap_error}",
            metadata={"bootstrap_ok": ready},
        )

    @staticmethod
    def to_dict(status: HealthStatus) -> Dict[str, Any]:
        """Convert HealthStatus to dict for JSON serialization."""
        return asdict(status)


# Global health checker instance
_health_checker: Optional[HealthChecker] = None


def initialize_health_checker() -> HealthChecker:
    """Initialize global health checker."""
    global _health_checker
    _health_checker = HealthChecker(start_time=time.time())
    return _health_checker


def get_health_checker() -> HealthChecker:
    """Get or initialize health checker."""
    if _health_checker is None:
        return initialize_health_checker()
    return _health_checker
