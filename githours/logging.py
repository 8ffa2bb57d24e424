import logging
import os
from typing import Any

# Library logger; silent unless the caller attaches a handler
logger = logging.getLogger("githours")
logger.addHandler(logging.NullHandler())


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance for the specified name.

    Args:
        name: The name of the logger to get. If None, returns the main githours logger.
              If specified, returns a child logger of the main githours logger.

    Returns:
        logging.Logger: The requested logger instance.
    """
    if name is None:
        return logger
    return logger.getChild(name)


def set_log_level(level: int | str) -> None:
    """Set the logging level for the githours library.

    Args:
        level: The logging level to set. Can be either a string (e.g., 'INFO')
               or an integer (e.g., logging.INFO).
    """
    logger.setLevel(level)


def add_stream_handler(
    level: int | str = logging.INFO,
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    **handler_kwargs: Any,
) -> None:
    """Attach a stream handler to the githours logger, once.

    Args:
        level: The logging level for the handler. Defaults to INFO.
        format_string: The format string for log messages.
        **handler_kwargs: Additional keyword arguments to pass to StreamHandler.
    """
    if any(type(h) is logging.StreamHandler for h in logger.handlers):
        logger.warning("StreamHandler already exists for githours logger.")
        return

    handler = logging.StreamHandler(**handler_kwargs)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(handler)


def add_file_handler(
    filename: str,
    level: int | str = logging.DEBUG,
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    **handler_kwargs: Any,
) -> None:
    """Attach a file handler to the githours logger.

    Args:
        filename: The name of the file to log to.
        level: The logging level for the handler. Defaults to DEBUG, so a log file
            records the per-commit filter decisions.
        format_string: The format string for log messages.
        **handler_kwargs: Additional keyword arguments to pass to FileHandler.
    """
    path = os.path.abspath(filename)
    if any(isinstance(h, logging.FileHandler) and h.baseFilename == path for h in logger.handlers):
        logger.warning(f"FileHandler for {filename} already exists for githours logger.")
        return

    handler = logging.FileHandler(path, **handler_kwargs)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(handler)


def remove_all_handlers() -> None:
    """Remove every handler from the githours logger except the NullHandler."""
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


__all__ = [
    "logger",
    "get_logger",
    "set_log_level",
    "add_stream_handler",
    "add_file_handler",
    "remove_all_handlers",
]
