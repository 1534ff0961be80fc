"""
Centralized logging configuration for the Living History Engine.

Call setup_logging() once at application startup (from the FastAPI
lifespan handler).  Every source module then gets its own logger via:

    import logging
    logger = logging.getLogger(__name__)

Level mapping:
  DEBUG   – cache hits, poll attempts, reducer events
  INFO    – era starts, navigation, media generation progress
  WARNING – fallbacks, discarded stale results, missing credentials
  ERROR   – failed gateway calls, failed media downloads
"""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure root logger and quiet noisy third-party loggers."""
    fmt = "[%(name)s] %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        stream=sys.stdout,
        force=True,
    )

    # Quiet noisy third-party loggers
    for name in (
        "httpx",
        "httpcore",
        "uvicorn.access",
        "google_genai",
        "google_genai.models",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)
