"""
Logging setup for the verbatim coder.
Library modules only call logging.getLogger(__name__); the host application calls setup_logging once.
"""

import logging
import sys
from typing import List, Optional

from config import LOG_FORMAT, LOG_LEVEL

_PACKAGE_LOGGERS = ("core", "coding", "errors")
_OWNED_MARKER = "_verbatim_coder_handler"


def setup_logging(level: str = LOG_LEVEL, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for the package.

    Safe to call again: handlers installed by a previous call are replaced,
    handlers installed by anyone else are left alone.

    Args:
        level: Level name, e.g. "INFO" or "DEBUG"
        log_file: Also append records to this file when given

    Returns:
        The root logger
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in [h for h in root.handlers if getattr(h, _OWNED_MARKER, False)]:
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _OWNED_MARKER, True)
        root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    for name in _PACKAGE_LOGGERS:
        logging.getLogger(name).setLevel(level.upper())

    return root
