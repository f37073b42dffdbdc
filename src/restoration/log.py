"""
Logging setup for scripts and host applications.

The library disables its own loguru messages on import; call
:func:`configure_logging` to see them.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from restoration.config import settings


def configure_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> None:
    """Enable the ``restoration`` logger with a stderr sink and a rotating file sink.

    :param level: minimum level, defaults to ``settings.LOG_LEVEL``
    :param log_dir: directory for the log file, defaults to ``settings.LOG_DIR``;
                    pass an empty string to skip the file sink
    """
    level = level or settings.LOG_LEVEL
    log_dir = settings.LOG_DIR if log_dir is None else log_dir

    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        logger.add(
            str(Path(log_dir) / "restoration_{time:YYYYMMDD}.log"),
            level=level,
            rotation="10 MB",
            retention=10,
            encoding="utf-8",
        )
    logger.enable("restoration")
