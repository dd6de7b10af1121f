"""Tracing infrastructure for observability."""

from tracing.tracer import Tracer, TraceMetadata, NoOpTracer, LoggingTracer
from tracing.tracer_factory import create_tracer, get_tracer_backend, get_tracer_config

__all__ = [
    "Tracer",
    "TraceMetadata",
    "NoOpTracer",
    "LoggingTracer",
    "create_tracer",
    "get_tracer_backend",
    "get_tracer_config",
]
