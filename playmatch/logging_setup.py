"""Root logger configuration."""

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Set up the root logger.

    Args:
        level: Level name (DEBUG, INFO, ...). Falls back to the
            PLAYMATCH_LOG_LEVEL environment variable, then INFO.
    """
    level_name = (level or os.environ.get("PLAYMATCH_LOG_LEVEL") or "INFO").upper()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("")
    root.handlers = [handler]
    root.setLevel(getattr(logging, level_name, logging.INFO))

    # Request lines are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
