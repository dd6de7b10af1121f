"""HTTP API for the compute gateway."""

from .compute_routes import router as compute_router, get_compute_facade
from .health import HealthChecker, HealthStatus, get_health_checker, initialize_health_checker

__all__ = [
    "compute_router",
    "get_compute_facade",
    "HealthChecker",
    "HealthStatus",
    "get_health_checker",
    "initialize_health_checker",
]
