# mimeburst/utils/logging_utils.py

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

_LOGGER_CONFIGURED = False


def configure_logging(log_dir: Optional[str] = "logs", level: str = "INFO") -> None:
    """
    Configure loguru logger to log to stderr and, when log_dir is given,
    to a rotating file.
    Idempotent: safe to call multiple times.
    """
    global _LOGGER_CONFIGURED
    if _LOGGER_CONFIGURED:
        return

    # Remove default handlers (so we don't double-log)
    logger.remove()

    # Console. stdout belongs to the CLI report
    logger.add(
        sink=sys.stderr,
        level=level,
        backtrace=False,
        diagnose=False,
    )

    # File
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "mimeburst.log",
            rotation="10 MB",
            retention="14 days",
            level=level,
            backtrace=False,
            diagnose=False,
            enqueue=True,
            encoding="utf-8",
        )

    _LOGGER_CONFIGURED = True


def get_logger():
    """
    Return the shared loguru logger. Make sure configure_logging()
    was called once at startup.
    """
    return logger
