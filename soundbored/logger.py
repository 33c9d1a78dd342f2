from pathlib import Path
from typing import Any

from loguru import logger

_logger_initialized = False


def init_logger(log_file: str | None = None) -> None:
    """Initialize logger. If log_file is None, logging is disabled.

    The interactive UI owns the terminal, so there is never a stderr sink.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    logger.remove()

    if log_file is None:
        _logger_initialized = True
        return

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_path,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
        level="DEBUG",
        rotation="5 MB",
        retention="7 days",
    )

    _logger_initialized = True
    logger.bind(name="logger").info("Logger initialized")


def get_logger(name: str) -> Any:
    """Get a logger instance with the given name."""
    return logger.bind(name=name)
