"""
Infrastructure module exports.

Configuration and bootstrap for the compute gateway.
"""

from .config import ComputeConfig, get_config, ComputeBackendType, BatchModeType
from .bootstrap import InfraBootstrap, bootstrap_infrastructure

__all__ = [
    "ComputeConfig",
    "get_config",
    "ComputeBackendType",
    "BatchModeType",
    "InfraBootstrap",
    "bootstrap_infrastructure",
]
