"""
Tool-agnostic tracing abstraction.

Tracing is strictly passive:
- Never influences execution
- Never mutates state
- Never affects decisions
- Failures are silent and non-fatal
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class TraceMetadata:
    """Metadata associated with a trace span or event."""

    trace_id: str  # Mandatory: globally unique identifier
    request_id: Optional[str] = None  # Optional: inbound API request
    caller: Optional[str] = None  # Optional: calling service or client


class Tracer(ABC):
    """
    Abstract tracing interface.

    All implementations MUST guarantee:
    - No control flow influence
    - No state mutation
    - Non-fatal failures (never raise)
    """

    @abstractmethod
    def start_span(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> Optional[Any]:
        """
        Start a trace span (e.g., "compute_request").

        Returns:
            Span handle for end_span, or None if tracing disabled
        """
        pass

    @abstractmethod
    def end_span(self, span: Any, status: str, metadata: Dict[str, Any]) -> None:
        """
        End a trace span.

        Args:
            span: Span handle from start_span
            status: "success", "failure", or "fallback"
            metadata: Execution results (duration, error_type, etc.)
        """
        pass

    @abstractmethod
    def record_event(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> None:
        """
        Record a point-in-time event (e.g., "compute_fallback_used").
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Check if tracing is enabled."""
        pass


class NoOpTracer(Tracer):
    """
    No-op tracing implementation (when tracing is disabled).
    """

    def start_span(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> Optional[Any]:
        """No-op implementation."""
        return None

    def end_span(self, span: Any, status: str, metadata: Dict[str, Any]) -> None:
        """No-op implementation."""
        pass

    def record_event(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> None:
        """No-op implementation."""
        pass

    def is_enabled(self) -> bool:
        """Tracing is disabled."""
        return False


@dataclass
class _LogSpan:
    name: str
    trace_id: str
    started: float


class LoggingTracer(Tracer):
    """
    Tracer that writes spans and events to the standard logger.

    Useful locally and in deployments without a tracing backend.
    """

    def __init__(self, level: int = logging.INFO, log: Optional[logging.Logger] = None):
        self.level = level
        self._log = log or logger

    def start_span(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> Optional[Any]:
        try:
            self._log.log(self.level, f"span start {name} [trace_id={trace_metadata.trace_id}] {metadata}")
            return _LogSpan(name=name, trace_id=trace_metadata.trace_id, started=time.perf_counter())
        except Exception:
            return None

    def end_span(self, span: Any, status: str, metadata: Dict[str, Any]) -> None:
        if not isinstance(span, _LogSpan):
            return
        try:
            duration_ms = (time.perf_counter() - span.started) * 1000
            self._log.log(
                self.level,
                f"span end {span.name} [trace_id={span.trace_id}] "
                f"status={status} duration_ms={duration_ms:.1f} {metadata}",
            )
        except Exception:
            pass

    def record_event(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> None:
        try:
            self._log.log(self.level, f"event {name} [trace_id={trace_metadata.trace_id}] {metadata}")
        except Exception:
            pass

    def is_enabled(self) -> bool:
        return True
