"""
Logging setup for shopcart.

Usage:
    from shopcart.logging import get_logger
    logger = get_logger(__name__)
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Characters that could forge extra log lines (CWE-117)
_UNSAFE_CHARS = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": ""})


def _configure_root_logger() -> None:
    """Attach a stdout handler at LOG_LEVEL unless the host app already configured logging."""
    root = logging.getLogger()
    if root.handlers:
        return

    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.setLevel(level)
    root.addHandler(handler)

    # One line per inventory request is noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


_configure_root_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: object | None) -> str:
    """Escape a caller-supplied product id and keep its first 8 characters ("N/A" if empty)."""
    if id_value is None or id_value == "":
        return "N/A"
    return str(id_value).translate(_UNSAFE_CHARS)[:8]


__all__ = ["LOG_FORMAT", "get_logger", "sanitize_id_for_logging"]
