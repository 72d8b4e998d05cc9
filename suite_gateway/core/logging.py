"""
Logging utilities for the gateway application.

Provides a consistent logging format and configuration.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # google-api-python-client logs discovery cache warnings on every build()
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


__all__ = ["configure_logging"]
