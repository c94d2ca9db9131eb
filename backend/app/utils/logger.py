"""
Logging setup for the barter backend.
"""

import logging
import os
import sys
from typing import Optional

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once; an explicit ``level`` is always applied."""
    global _configured
    if _configured and level is None:
        return

    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level, logging.INFO))

    formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    # Avoid duplicate handlers under uvicorn --reload
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
