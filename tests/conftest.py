"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import Optional

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from compute import (  # noqa: E402
    ComputeBackend,
    ComputeFacade,
    FallbackEmbedder,
    ResultPoller,
    StatsCollector,
    StubComputeBackend,
    TaskSubmitter,
)

TEST_DIMENSION = 32


async def no_sleep(_seconds: float) -> None:
    """Poll sleep replacement that returns immediately."""
    return None


@pytest.fixture
def dimension() -> int:
    return TEST_DIMENSION


@pytest.fixture
def stub_backend() -> StubComputeBackend:
    return StubComputeBackend(dimension=TEST_DIMENSION)


@pytest.fixture
def make_facade():
    """Factory fixture: build a facade around any backend with a fast poller."""

    def _make(
        backend: Optional[ComputeBackend] = None,
        max_attempts: int = 3,
        batch_mode: str = "per_item",
        stats: Optional[StatsCollector] = None,
        tracer=None,
        max_concurrency: int = 4,
    ) -> ComputeFacade:
        backend = backend or StubComputeBackend(dimension=TEST_DIMENSION)
        return ComputeFacade(
            submitter=TaskSubmitter(backend, default_model="test-model"),
            poller=ResultPoller(
                backend,
                dimension=TEST_DIMENSION,
                interval_s=0.01,
                max_attempts=max_attempts,
                sleep=no_sleep,
            ),
            fallback=FallbackEmbedder(dimension=TEST_DIMENSION),
            stats=stats,
            batch_mode=batch_mode,
            max_concurrency=max_concurrency,
            tracer=tracer,
        )

    return _make
