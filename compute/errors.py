"""
Compute error taxonomy.

Every failure on the network path is one of four typed errors:

  Error               error_type            Handling
  ──────────────────  ────────────────────  ────────────────────────────
  InvalidInput        invalid_input         surfaced to caller, no retry
  NetworkUnavailable  network_unavailable   facade falls back
  TaskFailed          task_failed           facade falls back
  PollTimeout         poll_timeout          facade falls back

Backends translate transport exceptions into this taxonomy so that the
facade never needs a blanket ``except Exception``.
"""

from typing import Optional


class ComputeError(Exception):
    """Base class for all compute-path failures."""

    error_type: str = "compute_error"

    def __init__(self, message: str, task_id: Optional[str] = None):
        self.message = message
        self.task_id = task_id
        super().__init__(message)

    def __str__(self) -> str:
        if self.task_id:
            return f"{self.error_type}[{self.task_id}]: {self.message}"
        return f"{self.error_type}: {self.message}"


class InvalidInput(ComputeError):
    """Empty or malformed request. Never retried, never falls back."""

    error_type = "invalid_input"


class NetworkUnavailable(ComputeError):
    """Transport-level failure or a submission the network refused."""

    error_type = "network_unavailable"


class TaskFailed(ComputeError):
    """The network reported failure, or a success without a usable result."""

    error_type = "task_failed"


class PollTimeout(ComputeError):
    """Poll budget exhausted without a terminal status."""

    error_type = "poll_timeout"

    def __init__(
        self,
        message: str,
        task_id: Optional[str] = None,
        attempts: int = 0,
        last_error: Optional[ComputeError] = None,
    ):
        super().__init__(message, task_id=task_id)
        self.attempts = attempts
        self.last_error = last_error
