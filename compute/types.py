from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from .errors import ComputeError

EmbeddingVector = List[float]
TaskInput = Union[str, List[str]]
EmbeddingSource = Literal["network", "fallback"]
OutcomeStatus = Literal["success", "failure"]


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.SUCCEEDED, TaskStatus.FAILED, TaskStatus.TIMED_OUT)


# Wire status strings reported by the network, mapped onto TaskStatus.
_WIRE_STATUS: Dict[str, TaskStatus] = {
    "pending": TaskStatus.PENDING,
    "queued": TaskStatus.PENDING,
    "submitted": TaskStatus.PENDING,
    "running": TaskStatus.RUNNING,
    "processing": TaskStatus.RUNNING,
    "completed": TaskStatus.SUCCEEDED,
    "succeeded": TaskStatus.SUCCEEDED,
    "success": TaskStatus.SUCCEEDED,
    "failed": TaskStatus.FAILED,
    "error": TaskStatus.FAILED,
}


def parse_wire_status(value: Any) -> TaskStatus:
    """Map a network status string to TaskStatus. Unknown values read as pending."""
    if not isinstance(value, str):
        return TaskStatus.PENDING
    return _WIRE_STATUS.get(value.strip().lower(), TaskStatus.PENDING)


@dataclass
class ComputeTask:
    """
    A unit of submitted computation.

    Created by the submitter, mutated only by the poller.
    Invariant: result is set iff status is SUCCEEDED.
    """

    id: str
    input: TaskInput
    model: str
    status: TaskStatus = TaskStatus.PENDING
    result: Optional[Union[EmbeddingVector, List[EmbeddingVector]]] = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def is_batch(self) -> bool:
        return isinstance(self.input, list)

    def mark_running(self) -> None:
        self.status = TaskStatus.RUNNING

    def mark_succeeded(self, result: Union[EmbeddingVector, List[EmbeddingVector]]) -> None:
        self.status = TaskStatus.SUCCEEDED
        self.result = result
        self.error = None

    def mark_failed(self, error: str) -> None:
        self.status = TaskStatus.FAILED
        self.result = None
        self.error = error

    def mark_timed_out(self, error: str) -> None:
        self.status = TaskStatus.TIMED_OUT
        self.result = None
        self.error = error


@dataclass
class TaskStatusReport:
    """One status query answer from a backend."""

    status: TaskStatus
    result: Optional[Any] = None      # raw payload, coerced by the poller
    error: Optional[str] = None


@dataclass
class NetworkOutcome:
    """
    Tagged result of the network path for one request.

    success  → vectors holds one vector per requested text
    failure  → error holds the typed ComputeError that ended the attempt
    """

    status: OutcomeStatus
    vectors: List[EmbeddingVector] = field(default_factory=list)
    task_id: Optional[str] = None
    error: Optional[ComputeError] = None

    @classmethod
    def succeeded(cls, vectors: List[EmbeddingVector], task_id: Optional[str]) -> "NetworkOutcome":
        return cls(status="success", vectors=vectors, task_id=task_id)

    @classmethod
    def failed(cls, error: ComputeError) -> "NetworkOutcome":
        return cls(status="failure", task_id=error.task_id, error=error)


@dataclass
class EmbeddingResponse:
    vector: EmbeddingVector
    dimension: int
    model: str
    tokens: int
    source: EmbeddingSource
    task_id: Optional[str] = None
    error_type: Optional[str] = None   # set when source == "fallback"
    metadata: Optional[Dict[str, Any]] = None
