"""
Bounded result polling.

Rules:
- At most ``max_attempts`` status queries per task, ``interval_s`` apart
- No sleep after the final query
- Transport errors consume an attempt; they never extend the budget
- Failed → TaskFailed immediately; budget exhausted → PollTimeout
- A success without a usable result is a TaskFailed
- Cancellation (asyncio.CancelledError) propagates; the task is abandoned
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Union

from .base import ComputeBackend
from .errors import NetworkUnavailable, PollTimeout, TaskFailed
from .types import ComputeTask, EmbeddingVector, TaskStatus
from .vectors import coerce_vector

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class ResultPoller:
    """
    Drives a submitted task to a terminal status.

    Args:
        backend: Compute backend boundary
        dimension: Expected embedding length
        interval_s: Delay between consecutive status queries
        max_attempts: Maximum number of status queries
        sleep: Awaitable sleep, injectable for tests
    """

    def __init__(
        self,
        backend: ComputeBackend,
        dimension: int,
        interval_s: float = 2.0,
        max_attempts: int = 15,
        sleep: Sleep = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.backend = backend
        self.dimension = dimension
        self.interval_s = interval_s
        self.max_attempts = max_attempts
        self._sleep = sleep

    @property
    def budget_s(self) -> float:
        """Upper bound on time spent sleeping between queries."""
        return self.interval_s * (self.max_attempts - 1)

    async def poll(self, task: ComputeTask) -> ComputeTask:
        """
        Poll ``task`` until it is terminal.

        Returns:
            The same task, SUCCEEDED with ``result`` set

        Raises:
            TaskFailed: network reported failure or a malformed result
            PollTimeout: budget exhausted (including repeated transport errors)
        """
        last_error: Optional[NetworkUnavailable] = None

        for attempt in range(1, self.max_attempts + 1):
            task.attempts = attempt
            try:
                report = await self.backend.fetch_status(task.id)
            except NetworkUnavailable as e:
                last_error = e
                logger.warning(
                    f"Polling error for task {task.id} "
                    f"(attempt {attempt}/{self.max_attempts}): {e.message}"
                )
            else:
                if report.status == TaskStatus.SUCCEEDED:
                    result = self._extract_result(task, report.result)
                    task.mark_succeeded(result)
                    logger.info(f"Compute task {task.id} completed after {attempt} poll(s)")
                    return task

                if report.status == TaskStatus.FAILED:
                    reason = report.error or "network reported failure"
                    task.mark_failed(reason)
                    raise TaskFailed(reason, task_id=task.id)

                if report.status == TaskStatus.RUNNING:
                    task.mark_running()

            if attempt < self.max_attempts:
                await self._sleep(self.interval_s)

        message = f"no terminal status after {self.max_attempts} attempt(s)"
        task.mark_timed_out(message)
        raise PollTimeout(message, task_id=task.id, attempts=self.max_attempts, last_error=last_error)

    def _extract_result(
        self, task: ComputeTask, raw: Any
    ) -> Union[EmbeddingVector, List[EmbeddingVector]]:
        """Coerce a success payload into vectors, or fail the task."""
        try:
            if task.is_batch:
                vectors = raw.get("embeddings") if isinstance(raw, dict) else raw
                if not isinstance(vectors, list) or len(vectors) != len(task.input):
                    raise ValueError(
                        f"expected {len(task.input)} embeddings, got "
                        f"{len(vectors) if isinstance(vectors, list) else type(vectors).__name__}"
                    )
                return [coerce_vector(v, self.dimension) for v in vectors]

            vector = raw.get("embedding") if isinstance(raw, dict) else raw
            return coerce_vector(vector, self.dimension)

        except ValueError as e:
            reason = f"malformed result: {e}"
            task.mark_failed(reason)
            raise TaskFailed(reason, task_id=task.id) from e
