"""
Infrastructure initialization and bootstrap.

Singleton pattern for creating the compute gateway from configuration.
"""

import logging
from typing import Optional

from compute import ComputeBackend, ComputeFacade, StatsCollector
from tracing import Tracer

from .config import ComputeConfig, get_config

logger = logging.getLogger(__name__)


class InfraBootstrap:
    """
    Bootstrap infrastructure based on configuration.

    Singleton pattern - single instance per process, so the stats
    collector is shared by every request the process serves.
    """

    _instance: Optional["InfraBootstrap"] = None

    def __init__(self, config: Optional[ComputeConfig] = None):
        """Initialize bootstrap with configuration."""
        self.config = config or get_config()
        self.backend = self.config.create_backend()
        self.stats = StatsCollector()
        self.tracer = self.config.create_tracer()
        self.facade = self.config.create_facade(
            backend=self.backend, stats=self.stats, tracer=self.tracer
        )
        logger.info(f"Compute gateway bootstrapped: {self!r}")

    @classmethod
    def get_instance(cls, config: Optional[ComputeConfig] = None) -> "InfraBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton InfraBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    def get_backend(self) -> ComputeBackend:
        return self.backend

    def get_facade(self) -> ComputeFacade:
        return self.facade

    def get_tracer(self) -> Tracer:
        return self.tracer

    def __repr__(self) -> str:
        """String representation showing configured backends."""
        return (
            f"InfraBootstrap(compute={self.config.compute_backend}, "
            f"model={self.config.default_model}, dim={self.config.dimension}, "
            f"batch={self.config.batch_mode}, tracer={self.config.tracer_backend})"
        )


def bootstrap_infrastructure(config: Optional[ComputeConfig] = None) -> InfraBootstrap:
    """
    Bootstrap the compute gateway.

    Args:
        config: Optional custom configuration

    Returns:
        InfraBootstrap instance with all components initialized
    """
    return InfraBootstrap.get_instance(config)
