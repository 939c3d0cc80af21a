"""HTTP client used by harvesting jobs."""

from .client import build_client

__all__ = ["build_client"]
