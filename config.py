"""
Configuration management for the compute gateway.

Loads environment variables from .env file and provides typed access to
server configuration. Compute settings live in infra.config and are read
only there.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

from infra import get_config  # noqa: E402


class Config:
    """Server configuration for the compute gateway."""

    # API server
    PORT = int(os.getenv("PORT", "8000"))
    HOST = os.getenv("HOST", "0.0.0.0")
    CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration; unsigned network requests outside development are flagged."""
        compute = get_config()
        if compute.compute_backend == "network" and not compute.signing_key and cls.ENVIRONMENT != "development":
            print("⚠️  COMPUTE_SIGNING_KEY not set. Compute requests will be sent unsigned.")
            return False
        return True


if __name__ == "__main__":
    # Test configuration loading
    compute = get_config()
    print("Configuration loaded:")
    print(f"  Port: {Config.PORT}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"  Compute Backend: {compute.compute_backend}")
    print(f"  Compute API: {compute.compute_api_url}")
    print(f"  Signing Key: {'✓ Set' if compute.signing_key else '✗ Missing'}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
