"""
Tests for ResultPoller.

Verifies:
✔ Success returns the task with a coerced result
✔ Never-terminal task → PollTimeout after exactly max_attempts queries
✔ Failed → TaskFailed immediately
✔ Transport errors consume attempts, never extend the budget
✔ Malformed success → TaskFailed, no result kept
✔ Caller cancellation aborts the loop
"""

import asyncio

import pytest

from compute import (
    ComputeBackend,
    ComputeTask,
    NetworkUnavailable,
    PollTimeout,
    ResultPoller,
    StubComputeBackend,
    TaskFailed,
    TaskStatus,
    TaskStatusReport,
)

DIM = 4


class ScriptedBackend(ComputeBackend):
    """Backend that replays a script of status reports / exceptions."""

    def __init__(self, script):
        self.script = list(script)
        self.status_calls = 0

    async def submit_task(self, payload, timeout_s):
        return "scripted-1"

    async def fetch_status(self, task_id):
        self.status_calls += 1
        step = self.script.pop(0) if self.script else TaskStatusReport(status=TaskStatus.PENDING)
        if isinstance(step, Exception):
            raise step
        return step

    async def health(self):
        return True

    async def network_stats(self):
        return {}


class SleepRecorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def make_poller(backend, max_attempts=5, interval_s=1.5, sleep=None):
    return ResultPoller(
        backend,
        dimension=DIM,
        interval_s=interval_s,
        max_attempts=max_attempts,
        sleep=sleep or SleepRecorder(),
    )


async def submitted(backend, text="hello") -> ComputeTask:
    task_id = await backend.submit_task({"input": text}, timeout_s=1.0)
    return ComputeTask(id=task_id, input=text, model="m")


class TestPollerSuccess:
    @pytest.mark.asyncio
    async def test_completes_after_running_steps(self):
        backend = StubComputeBackend(dimension=DIM, steps_to_complete=3)
        sleep = SleepRecorder()
        poller = make_poller(backend, max_attempts=5, sleep=sleep)
        task = await submitted(backend)

        result = await poller.poll(task)

        assert result is task
        assert task.status == TaskStatus.SUCCEEDED
        assert task.result == backend.expected_vector("hello")
        assert task.attempts == 3
        assert backend.status_calls == 3
        assert sleep.calls == [1.5, 1.5]

    @pytest.mark.asyncio
    async def test_batch_result(self):
        backend = StubComputeBackend(dimension=DIM)
        poller = make_poller(backend)
        task_id = await backend.submit_task({"input": ["a", "b"]}, timeout_s=1.0)
        task = ComputeTask(id=task_id, input=["a", "b"], model="m")

        await poller.poll(task)

        assert task.result == [backend.expected_vector("a"), backend.expected_vector("b")]

    @pytest.mark.asyncio
    async def test_transient_transport_error_then_success(self):
        backend = ScriptedBackend([
            NetworkUnavailable("blip"),
            TaskStatusReport(status=TaskStatus.SUCCEEDED, result={"embedding": [1, 0, 0, 0]}),
        ])
        task = ComputeTask(id="scripted-1", input="x", model="m")

        await make_poller(backend).poll(task)

        assert task.status == TaskStatus.SUCCEEDED
        assert task.result == [1.0, 0.0, 0.0, 0.0]
        assert backend.status_calls == 2

    @pytest.mark.asyncio
    async def test_bare_list_result_accepted(self):
        backend = ScriptedBackend([
            TaskStatusReport(status=TaskStatus.SUCCEEDED, result=[0.5, 0.5, 0.5, 0.5]),
        ])
        task = ComputeTask(id="scripted-1", input="x", model="m")

        await make_poller(backend).poll(task)

        assert task.result == [0.5, 0.5, 0.5, 0.5]


class TestPollerBudget:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_attempts", [1, 2, 7])
    async def test_timeout_after_exactly_max_attempts(self, max_attempts):
        backend = StubComputeBackend(dimension=DIM, mode="hang")
        sleep = SleepRecorder()
        poller = make_poller(backend, max_attempts=max_attempts, sleep=sleep)
        task = await submitted(backend)

        with pytest.raises(PollTimeout) as exc_info:
            await poller.poll(task)

        assert backend.status_calls == max_attempts
        assert len(sleep.calls) == max_attempts - 1
        assert exc_info.value.attempts == max_attempts
        assert exc_info.value.task_id == task.id
        assert task.status == TaskStatus.TIMED_OUT
        assert task.result is None

    @pytest.mark.asyncio
    async def test_transport_errors_exhaust_budget(self):
        backend = StubComputeBackend(dimension=DIM, mode="unavailable")
        poller = make_poller(backend, max_attempts=3)
        task = ComputeTask(id="never-submitted", input="x", model="m")

        with pytest.raises(PollTimeout) as exc_info:
            await poller.poll(task)

        assert backend.status_calls == 3
        assert isinstance(exc_info.value.last_error, NetworkUnavailable)

    def test_budget_seconds(self):
        poller = make_poller(StubComputeBackend(dimension=DIM), max_attempts=15, interval_s=2.0)
        assert poller.budget_s == 28.0

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            make_poller(StubComputeBackend(dimension=DIM), max_attempts=0)


class TestPollerFailures:
    @pytest.mark.asyncio
    async def test_failed_status_raises_immediately(self):
        backend = StubComputeBackend(dimension=DIM, mode="fail")
        poller = make_poller(backend, max_attempts=5)
        task = await submitted(backend)

        with pytest.raises(TaskFailed, match="stub task failed"):
            await poller.poll(task)

        assert backend.status_calls == 1
        assert task.status == TaskStatus.FAILED
        assert task.result is None

    @pytest.mark.asyncio
    async def test_wrong_dimension_is_task_failed(self):
        backend = ScriptedBackend([
            TaskStatusReport(status=TaskStatus.SUCCEEDED, result={"embedding": [1.0, 2.0]}),
        ])
        task = ComputeTask(id="scripted-1", input="x", model="m")

        with pytest.raises(TaskFailed, match="dimension mismatch"):
            await make_poller(backend).poll(task)

        assert task.status == TaskStatus.FAILED
        assert task.result is None

    @pytest.mark.asyncio
    async def test_missing_result_is_task_failed(self):
        backend = ScriptedBackend([TaskStatusReport(status=TaskStatus.SUCCEEDED, result=None)])
        task = ComputeTask(id="scripted-1", input="x", model="m")

        with pytest.raises(TaskFailed):
            await make_poller(backend).poll(task)

    @pytest.mark.asyncio
    async def test_batch_count_mismatch_is_task_failed(self):
        backend = ScriptedBackend([
            TaskStatusReport(status=TaskStatus.SUCCEEDED, result={"embeddings": [[0.0] * DIM]}),
        ])
        task = ComputeTask(id="scripted-1", input=["a", "b"], model="m")

        with pytest.raises(TaskFailed, match="expected 2 embeddings"):
            await make_poller(backend).poll(task)


class TestPollerCancellation:
    @pytest.mark.asyncio
    async def test_external_timeout_abandons_task(self):
        backend = StubComputeBackend(dimension=DIM, mode="hang")
        poller = ResultPoller(backend, dimension=DIM, interval_s=0.01, max_attempts=10_000)
        task = await submitted(backend)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(poller.poll(task), timeout=0.05)

        assert not task.status.is_terminal
        assert backend.status_calls < 10_000


class TestPollerOversizedResult:
    @pytest.mark.asyncio
    async def test_huge_integer_component_is_task_failed(self):
        huge = int("1" + "0" * 399)
        backend = ScriptedBackend([
            TaskStatusReport(status=TaskStatus.SUCCEEDED, result={"embedding": [huge, 0, 0, 0]}),
        ])
        task = ComputeTask(id="scripted-1", input="x", model="m")

        with pytest.raises(TaskFailed, match="non-finite"):
            await make_poller(backend).poll(task)

        assert task.status == TaskStatus.FAILED
        assert task.result is None
