import logging
import os
import sys
from typing import Dict, Optional

from medifast.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# One handler per log file, shared by every module logger writing to it.
_file_handlers: Dict[str, logging.Handler] = {}


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    configured = logging.getLevelName(settings.LOG_LEVEL)
    return configured if isinstance(configured, int) else logging.INFO


def _file_handler(log_file: str) -> logging.Handler:
    log_dir = str(settings.LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)
    path = os.path.join(log_dir, log_file)
    if path not in _file_handlers:
        handler = logging.FileHandler(path)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _file_handlers[path] = handler
    return _file_handlers[path]


def setup_logger(
    name: str,
    log_file: str = "app.log",
    level: Optional[int] = None,
    console: Optional[bool] = None,
    handler_level: Optional[int] = None,
) -> logging.Logger:
    """
    Configure and return a module-level logger.

    Level and console output default to MEDIFAST_LOG_LEVEL / MEDIFAST_CONSOLE_LOG.
    Console lines go to stderr so they never break the CLI's status line.
    """
    level = _resolve_level(level)
    console = settings.CONSOLE_LOGGING if console is None else console

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    if not logger.handlers:
        file_handler = _file_handler(log_file)
        file_handler.setLevel(min(file_handler.level or level, handler_level or level))
        logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(handler_level or level)
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(console_handler)

    return logger
