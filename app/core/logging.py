"""
Logging utilities for the gateway and its background session tasks.

Provides a consistent logging format and keeps chatty client libraries quiet.
"""

import logging
import sys

_NOISY_LOGGERS = ("botocore", "googleapiclient.discovery_cache", "httpx")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging"]
