import logging
import os
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_initialized = False


def _level(name) -> int:
    """Numeric level for a name such as ``DEBUG``; unknown names give ``INFO``."""
    level = logging.getLevelName((name or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _init_logging() -> None:
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(_level(os.getenv("LOG_LEVEL")))
    # Lambda installs its own handler on the root logger
    if not root.handlers:
        root.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Named logger; the root handler is installed on first use."""
    _init_logging()
    return logging.getLogger(name)
