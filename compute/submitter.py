"""
Task submission.

Validates input, builds the task request, signs it, and hands it to the
backend. One outbound request per call; nothing is retained locally
beyond the returned ComputeTask.

Request body:
    {
      "task_type":    "text_embedding" | "batch_text_embedding",
      "model":        "<model tag>",
      "input":        "<text>" | ["<text>", ...],
      "timestamp":    <ms since epoch>,
      "requester":    "<requester id>",
      "request_hash": "<sha256 of the canonical JSON above>",
      "signature":    "sha256=<HMAC(request_hash, signing_key)>"   # optional
    }
"""

import hashlib
import hmac
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from .base import ComputeBackend
from .errors import InvalidInput
from .types import ComputeTask, TaskInput

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-004"


def validate_text(text: Any) -> str:
    """Return ``text`` if it is a non-blank, UTF-8 encodable string, else raise InvalidInput."""
    if not isinstance(text, str):
        raise InvalidInput(f"text must be a string, got {type(text).__name__}")
    if not text.strip():
        raise InvalidInput("text must not be empty")
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidInput("text must be valid UTF-8") from None
    return text


def validate_texts(texts: Any) -> List[str]:
    """Validate a batch: non-empty list of non-blank strings."""
    if isinstance(texts, str) or not isinstance(texts, (list, tuple)):
        raise InvalidInput("texts must be a list of strings")
    if not texts:
        raise InvalidInput("texts must not be empty")
    for index, text in enumerate(texts):
        try:
            validate_text(text)
        except InvalidInput as e:
            raise InvalidInput(f"texts[{index}]: {e.message}") from e
    return list(texts)


class TaskSubmitter:
    """
    Builds and sends compute task requests.

    Args:
        backend: Compute backend boundary
        default_model: Model tag used when the caller omits one
        requester: Identifier of this gateway as seen by the network
        signing_key: HMAC key; requests are unsigned when empty
        submit_timeout_s: Timeout for single-text submissions
        batch_submit_timeout_s: Timeout for batch submissions
    """

    def __init__(
        self,
        backend: ComputeBackend,
        default_model: str = DEFAULT_MODEL,
        requester: str = "",
        signing_key: str = "",
        submit_timeout_s: float = 30.0,
        batch_submit_timeout_s: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.backend = backend
        self.default_model = default_model
        self.requester = requester
        self._signing_key = signing_key
        self.submit_timeout_s = submit_timeout_s
        self.batch_submit_timeout_s = batch_submit_timeout_s
        self._clock = clock

    async def submit(self, input: TaskInput, model: Optional[str] = None) -> ComputeTask:
        """
        Submit one task.

        Args:
            input: Non-empty text, or non-empty list of non-empty texts
            model: Model tag (defaults to ``default_model``)

        Returns:
            ComputeTask in PENDING state carrying the network task id

        Raises:
            InvalidInput: input is empty or malformed (no request is sent)
            NetworkUnavailable: endpoint unreachable or submission rejected
        """
        if isinstance(input, str):
            text_input: TaskInput = validate_text(input)
            timeout_s = self.submit_timeout_s
        else:
            text_input = validate_texts(input)
            timeout_s = self.batch_submit_timeout_s

        model_name = model or self.default_model
        payload = self.build_request(text_input, model_name)

        task_id = await self.backend.submit_task(payload, timeout_s)
        size = len(text_input) if isinstance(text_input, list) else 1
        logger.info(f"Submitted {payload['task_type']} task {task_id} ({size} text(s), model={model_name})")

        return ComputeTask(id=task_id, input=text_input, model=model_name)

    def build_request(self, input: TaskInput, model: str) -> Dict[str, Any]:
        """Build the signed request body for ``input``."""
        request: Dict[str, Any] = {
            "task_type": "batch_text_embedding" if isinstance(input, list) else "text_embedding",
            "model": model,
            "input": input,
            "timestamp": int(self._clock() * 1000),
            "requester": self.requester,
        }

        canonical = json.dumps(request, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        request_hash = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        request["request_hash"] = request_hash

        if self._signing_key:
            request["signature"] = "sha256=" + hmac.new(
                key=self._signing_key.encode("utf-8"),
                msg=request_hash.encode("utf-8"),
                digestmod=hashlib.sha256,
            ).hexdigest()

        return request

    @property
    def signs_requests(self) -> bool:
        return bool(self._signing_key)
