"""
HTTP backend for the external compute network.

Endpoints (relative to COMPUTE_API_URL):

  Method  Path                      Body / Response
  ──────  ────────────────────────  ──────────────────────────────────────
  POST    /tasks/submit             → {success, task_id, error}
  GET     /tasks/{task_id}/result   → {status, result, error}
  GET     /health                   → {status: "healthy"}
  GET     /network/stats            → {total_nodes, active_nodes, ...}

Invariants:
- One short-lived httpx.AsyncClient per request (no shared connection state)
- Every httpx failure is translated into NetworkUnavailable
- Request bodies are never logged (they carry signatures)
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .base import ComputeBackend
from .errors import NetworkUnavailable
from .types import TaskStatusReport, parse_wire_status

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api-compute.0g.ai"


class NetworkComputeBackend(ComputeBackend):
    """
    Compute network client over httpx.

    Usage:
        backend = NetworkComputeBackend("https://api-compute.0g.ai")
        task_id = await backend.submit_task(payload, timeout_s=30.0)
        report  = await backend.fetch_status(task_id)

    Tests inject ``transport=httpx.MockTransport(handler)``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        status_timeout_s: float = 5.0,
        health_timeout_s: float = 5.0,
        stats_timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.status_timeout_s = status_timeout_s
        self.health_timeout_s = health_timeout_s
        self.stats_timeout_s = stats_timeout_s
        self._transport = transport

    # ── Task lifecycle ────────────────────────────────────────

    async def submit_task(self, payload: Dict[str, Any], timeout_s: float) -> str:
        data = await self._request("POST", "/tasks/submit", timeout_s, json=payload)

        if not data.get("success"):
            reason = data.get("error") or "unknown error"
            raise NetworkUnavailable(f"submission rejected: {reason}")

        task_id = data.get("task_id")
        if not task_id or not isinstance(task_id, (str, int)):
            raise NetworkUnavailable("submission accepted without a task_id")
        return str(task_id)

    async def fetch_status(self, task_id: str) -> TaskStatusReport:
        path = f"/tasks/{quote(task_id, safe='')}/result"
        try:
            data = await self._request("GET", path, self.status_timeout_s)
        except NetworkUnavailable as e:
            e.task_id = task_id
            raise

        return TaskStatusReport(
            status=parse_wire_status(data.get("status")),
            result=data.get("result"),
            error=data.get("error"),
        )

    # ── Probes ────────────────────────────────────────────────

    async def health(self) -> bool:
        data = await self._request("GET", "/health", self.health_timeout_s)
        return data.get("status") == "healthy"

    async def network_stats(self) -> Dict[str, Any]:
        return await self._request("GET", "/network/stats", self.stats_timeout_s)

    # ── Transport ─────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        timeout_s: float,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Perform one request and return the decoded JSON object."""
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=timeout_s,
                transport=self._transport,
                headers={"Accept": "application/json"},
            ) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                data = response.json()

        except httpx.TimeoutException as e:
            raise NetworkUnavailable(f"{method} {path} timed out after {timeout_s}s") from e

        except httpx.HTTPStatusError as e:
            raise NetworkUnavailable(
                f"{method} {path} returned HTTP {e.response.status_code}"
            ) from e

        except httpx.HTTPError as e:
            raise NetworkUnavailable(f"{method} {path} failed: {type(e).__name__}: {e}") from e

        except ValueError as e:
            raise NetworkUnavailable(f"{method} {path} returned malformed JSON") from e

        if not isinstance(data, dict):
            raise NetworkUnavailable(f"{method} {path} returned {type(data).__name__}, expected object")

        logger.debug(f"{method} {path} → ok")
        return data
