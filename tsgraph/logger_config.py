import logging
import sys
from typing import Optional

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_LEVEL = "WARNING"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(stream=None, level: Optional[str] = None) -> None:
    """
    Configures logging for the tsgraph package.
    Sets the package logger's level and adds a console handler with a predefined format.
    The handler writes to the provided stream, or sys.stderr if stream is None,
    so stdout stays free for the entry stream.
    """
    level_name = (level or DEFAULT_LOG_LEVEL).upper()
    numeric_level = LEVELS.get(level_name, logging.WARNING)

    package_logger = logging.getLogger("tsgraph")
    package_logger.setLevel(numeric_level)

    # Remove existing handlers so repeated calls don't stack them.
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    output_stream = stream if stream is not None else sys.stderr
    console_handler = logging.StreamHandler(output_stream)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))

    package_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Retrieves a logger instance with the specified name.
    Relies on explicit setup_logging() call from the CLI/tests for output.
    """
    return logging.getLogger(name)
