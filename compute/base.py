from abc import ABC, abstractmethod
from typing import Any, Dict

from .types import TaskStatusReport


class ComputeBackend(ABC):
    """
    Abstract compute-network boundary.
    Submitter, poller and facade depend ONLY on this interface.

    Implementations raise NetworkUnavailable for transport failures and
    never leak transport-library exceptions.
    """

    @abstractmethod
    async def submit_task(self, payload: Dict[str, Any], timeout_s: float) -> str:
        """Send one task request and return the network's task id."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_status(self, task_id: str) -> TaskStatusReport:
        """Query the status of a task once."""
        raise NotImplementedError

    @abstractmethod
    async def health(self) -> bool:
        """Cheap liveness request. True iff the network reports healthy."""
        raise NotImplementedError

    @abstractmethod
    async def network_stats(self) -> Dict[str, Any]:
        """Raw network-wide statistics payload."""
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__
