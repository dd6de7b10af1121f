"""
Stub compute backend for testing and offline development.

Deterministic, in-process, and never touches the network.
"""

from itertools import count
from typing import Any, Dict, Iterable, Literal, Optional

from .base import ComputeBackend
from .errors import NetworkUnavailable
from .fallback import FallbackEmbedder
from .types import TaskStatus, TaskStatusReport

StubMode = Literal["success", "fail", "hang", "unavailable"]


class StubComputeBackend(ComputeBackend):
    """
    Deterministic fake compute network.

    Modes:
    - success:     tasks complete after ``steps_to_complete`` status queries
    - fail:        every task reports failed
    - hang:        every task stays pending forever
    - unavailable: every call raises NetworkUnavailable

    Tasks whose input contains any of ``fail_texts`` report failed even in
    success mode, which lets tests fail one batch item and not the others.

    Vectors come from a hash stream in a namespace distinct from the
    fallback embedder, so tests can tell the two paths apart.
    """

    def __init__(
        self,
        dimension: int = 768,
        mode: StubMode = "success",
        steps_to_complete: int = 1,
        fail_texts: Optional[Iterable[str]] = None,
    ):
        self.dimension = dimension
        self.mode = mode
        self.steps_to_complete = max(1, steps_to_complete)
        self.fail_texts = set(fail_texts or ())
        self._vectors = FallbackEmbedder(dimension=dimension, namespace="compute-stub-network")
        self._ids = count(1)
        self._tasks: Dict[str, Dict[str, Any]] = {}

        # Call counters for assertions
        self.submit_calls = 0
        self.status_calls = 0
        self.health_calls = 0
        self.submitted_payloads: list = []

    def expected_vector(self, text: str) -> list:
        """Vector this stub returns for ``text`` on success."""
        return self._vectors.embed(text)

    async def submit_task(self, payload: Dict[str, Any], timeout_s: float) -> str:
        self.submit_calls += 1
        if self.mode == "unavailable":
            raise NetworkUnavailable("stub network unreachable")

        self.submitted_payloads.append(payload)
        task_id = f"stub-task-{next(self._ids)}"
        self._tasks[task_id] = {"input": payload["input"], "polls": 0}
        return task_id

    async def fetch_status(self, task_id: str) -> TaskStatusReport:
        self.status_calls += 1
        if self.mode == "unavailable":
            raise NetworkUnavailable("stub network unreachable", task_id=task_id)

        task = self._tasks.get(task_id)
        if task is None:
            raise NetworkUnavailable("unknown task", task_id=task_id)

        task["polls"] += 1
        texts = task["input"] if isinstance(task["input"], list) else [task["input"]]

        if self.mode == "hang":
            return TaskStatusReport(status=TaskStatus.PENDING)

        if self.mode == "fail" or any(text in self.fail_texts for text in texts):
            return TaskStatusReport(status=TaskStatus.FAILED, error="stub task failed")

        if task["polls"] < self.steps_to_complete:
            return TaskStatusReport(status=TaskStatus.RUNNING)

        if isinstance(task["input"], list):
            result = {"embeddings": [self.expected_vector(t) for t in texts]}
        else:
            result = {"embedding": self.expected_vector(task["input"])}
        return TaskStatusReport(status=TaskStatus.SUCCEEDED, result=result)

    async def health(self) -> bool:
        self.health_calls += 1
        if self.mode == "unavailable":
            raise NetworkUnavailable("stub network unreachable")
        return True

    async def network_stats(self) -> Dict[str, Any]:
        if self.mode == "unavailable":
            raise NetworkUnavailable("stub network unreachable")
        return {
            "total_nodes": 1,
            "active_nodes": 1,
            "avg_latency": 0,
            "total_tasks": len(self._tasks),
            "queued_tasks": 0,
        }
