"""
Tracer factory and initialization logic.

Implements TRACER_BACKEND setting:
- "noop" (default): No observability
- "logging": Spans and events written to the standard logger
"""

import logging
import os

from tracing.tracer import LoggingTracer, NoOpTracer, Tracer

logger = logging.getLogger(__name__)

VALID_BACKENDS = {"noop", "logging"}


def get_tracer_backend() -> str:
    """
    Get the configured tracer backend.

    Environment Variable:
        TRACER_BACKEND: "noop" (default) or "logging"

    Returns:
        Backend name (lowercase)
    """
    backend = os.getenv("TRACER_BACKEND", "noop").lower().strip()

    if backend not in VALID_BACKENDS:
        # Unknown backend, default to noop
        return "noop"

    return backend


def create_tracer(backend: str = "") -> Tracer:
    """
    Create a tracer instance.

    Args:
        backend: Explicit backend name; TRACER_BACKEND is used when empty

    Returns:
        Tracer instance (never None, defaults to NoOpTracer)
    """
    backend = (backend or get_tracer_backend()).lower().strip()

    if backend == "logging":
        return LoggingTracer()

    if backend not in VALID_BACKENDS:
        logger.warning(f"Unknown tracer backend '{backend}', using noop")
    return NoOpTracer()


def get_tracer_config() -> dict:
    """
    Get current tracer configuration for health/debug endpoints.
    """
    backend = get_tracer_backend()
    return {
        "tracer_backend": backend,
        "enabled": backend != "noop",
    }
