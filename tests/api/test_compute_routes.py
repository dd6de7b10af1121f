"""
tests/api/test_compute_routes.py

HTTP surface of the compute gateway.

Verifies:
✔ Embedding endpoints return fixed-length vectors tagged by source
✔ Empty input → 400, no network call
✔ Availability endpoint reports false instead of erroring
✔ Health endpoints never touch the compute network
"""

import logging
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api import get_compute_facade
from compute import StubComputeBackend
from infra import InfraBootstrap
from tracing import LoggingTracer
from main import app

DIM = 32


@pytest.fixture
def stub_env(monkeypatch):
    """Bootstrap against the stub backend and restore the singleton afterwards."""
    monkeypatch.setenv("COMPUTE_BACKEND", "stub")
    monkeypatch.setenv("VECTOR_DIMENSION", str(DIM))
    InfraBootstrap.reset()
    yield
    InfraBootstrap.reset()
    app.dependency_overrides.clear()


@pytest.fixture
def client_for(stub_env, make_facade):
    """Factory: TestClient whose routes use a facade built around ``backend``."""

    def _client(backend=None, tracer=None):
        backend = backend or StubComputeBackend(dimension=DIM)
        facade = make_facade(backend, tracer=tracer)
        app.dependency_overrides[get_compute_facade] = lambda: facade
        return TestClient(app), backend, facade

    return _client


class TestEmbeddingRoutes:
    def test_single_embedding(self, client_for):
        client, backend, _ = client_for()

        response = client.post("/compute/embeddings", json={"text": "hello"})

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "network"
        assert body["dimension"] == DIM
        assert body["vector"] == backend.expected_vector("hello")
        assert "metadata" not in body

    def test_fallback_embedding(self, client_for):
        client, _, _ = client_for(StubComputeBackend(dimension=DIM, mode="unavailable"))

        response = client.post("/compute/embeddings", json={"text": "hello"})

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "fallback"
        assert body["error_type"] == "network_unavailable"
        assert len(body["vector"]) == DIM

    def test_empty_text_is_400(self, client_for):
        client, backend, _ = client_for()

        response = client.post("/compute/embeddings", json={"text": "  "})

        assert response.status_code == 400
        assert "empty" in response.json()["detail"]
        assert backend.submit_calls == 0

    def test_batch_embeddings(self, client_for):
        client, _, _ = client_for(StubComputeBackend(dimension=DIM, fail_texts={"b"}))

        response = client.post("/compute/embeddings/batch", json={"texts": ["a", "b", "c"]})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert body["fallbacks"] == 1
        assert [e["source"] for e in body["embeddings"]] == ["network", "fallback", "network"]

    def test_empty_batch_is_400(self, client_for):
        client, _, _ = client_for()
        response = client.post("/compute/embeddings/batch", json={"texts": []})
        assert response.status_code == 400

    def test_similarity(self, client_for):
        client, _, _ = client_for()

        response = client.post("/compute/similarity", json={"text_a": "same", "text_b": "same"})

        assert response.status_code == 200
        assert response.json()["similarity"] == pytest.approx(1.0)
        assert response.json()["sources"] == ["network", "network"]


class TestProbeRoutes:
    def test_availability_false_is_200(self, client_for):
        client, _, _ = client_for(StubComputeBackend(dimension=DIM, mode="unavailable"))

        response = client.get("/compute/availability")

        assert response.status_code == 200
        assert response.json() == {"available": False}

    def test_stats_reflect_requests(self, client_for):
        client, _, _ = client_for()
        client.post("/compute/embeddings", json={"text": "one"})

        body = client.get("/compute/stats").json()

        assert body["requests_submitted"] == 1
        assert body["successes"] == 1
        assert body["fallback_enabled"] is True

    def test_network_disconnected(self, client_for):
        client, _, _ = client_for(StubComputeBackend(dimension=DIM, mode="unavailable"))

        body = client.get("/compute/network").json()

        assert body["connected"] is False
        assert body["error"]

    def test_config_hides_signing_key(self, client_for, monkeypatch):
        monkeypatch.setenv("COMPUTE_SIGNING_KEY", "super-secret")
        client, _, _ = client_for()

        body = client.get("/compute/config").json()

        assert body["compute_backend"] == "stub"
        assert body["signed_requests"] is True
        assert "super-secret" not in str(body)


class TestHealthRoutes:
    def test_live(self, client_for):
        client, _, _ = client_for()
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_without_network(self, client_for):
        client, backend, _ = client_for(StubComputeBackend(dimension=DIM, mode="unavailable"))

        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["ready"] is True
        assert backend.health_calls == 0

    def test_root_lists_endpoints(self, client_for):
        client, _, _ = client_for()
        assert "embedding" in client.get("/").json()["endpoints"]


class TestEncodingErrors:
    def test_lone_surrogate_is_400(self, client_for):
        client, backend, _ = client_for()

        response = client.post(
            "/compute/embeddings",
            content=b'{"text": "abc\\ud800"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "text must be valid UTF-8"
        assert backend.submit_calls == 0


class TestRequestTracing:
    def test_logging_tracer_records_request_span(self, client_for, caplog):
        client, _, _ = client_for(tracer=LoggingTracer())

        with caplog.at_level(logging.INFO, logger="tracing.tracer"):
            response = client.post(
                "/compute/embeddings", json={"text": "hello"}, headers={"X-Request-ID": "req-7"}
            )

        assert response.status_code == 200
        assert "span start compute_request" in caplog.text
        assert "event compute_task_submitted" in caplog.text
        assert "trace_id=req-7" in caplog.text

    def test_trace_id_generated_without_header(self, client_for):
        tracer = MagicMock()
        client, _, _ = client_for(tracer=tracer)

        client.post("/compute/embeddings/batch", json={"texts": ["a", "b"]})

        trace_metadata = tracer.start_span.call_args.args[2]
        assert trace_metadata.trace_id
        assert trace_metadata.request_id is None

    def test_availability_emits_probe_event(self, client_for):
        tracer = MagicMock()
        client, _, _ = client_for(tracer=tracer)

        client.get("/compute/availability", headers={"X-Request-ID": "req-9"})

        name, metadata, trace_metadata = tracer.record_event.call_args.args
        assert name == "compute_network_probe"
        assert metadata == {"available": True}
        assert trace_metadata.request_id == "req-9"


class TestHealthMode:
    def test_mode_follows_compute_config(self, client_for):
        client, _, _ = client_for()

        assert client.get("/health/live").json()["mode"] == "stub"
        assert client.get("/health/ready").json()["mode"] == "stub"
