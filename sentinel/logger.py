"""
Logging setup for the inactivity sentinel.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

_LOG_INITIALISED = False
LOG_DIR = Path.home() / ".sentinel" / "logs"
DEFAULT_LOG_PATH = LOG_DIR / "sentinel.log"

# Library modules stay silent until a host opts in through configure()
_logger.disable("sentinel")


def configure(log_path: Optional[Path] = None, level: str = "INFO") -> None:
    """
    Configure loguru for the application.

    Adds a console sink and a rotating file sink, then enables the
    package's log records. Only the first call has an effect.
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED:
        return
    target = Path(log_path) if log_path else DEFAULT_LOG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)

    _logger.remove()
    if sys.stderr is not None:
        _logger.add(sys.stderr, level=level.upper())
    _logger.add(
        target,
        level="DEBUG",
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
        backtrace=True,
        diagnose=False,
    )
    _logger.enable("sentinel")
    _LOG_INITIALISED = True


def get_logger():
    """Return the shared logger instance."""
    return _logger
