"""Logging configuration."""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from gherkin_dictionary.config import Config

LOGGER_NAME = "gherkin_dictionary"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP libraries that log every request at DEBUG
NOISY_LOGGERS = ("urllib3", "requests")


class JsonFormatter(logging.Formatter):
    """Format log records as JSON lines.

    Records carrying a ``source`` extra (``jira`` or ``agiletest``) keep it,
    so fetch runs can be filtered per backend.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }
        source = getattr(record, "source", None)
        if source:
            log_obj["source"] = source
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, ensure_ascii=False)


def setup_logging(
    log_file: Optional[Path] = None,
    log_level: str = "INFO",
    json_logs: bool = False,
) -> logging.Logger:
    """Set up the package logger.

    Console output goes to stderr so ``--json`` results on stdout stay
    parseable. HTTP library loggers are held at WARNING unless the level
    is DEBUG.

    Args:
        log_file: Path to log file (optional)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Whether to use JSON formatting for file logs

    Returns:
        Configured logger instance
    """
    level = log_level.upper()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console_formatter = logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(JsonFormatter() if json_logs else console_formatter)
        logger.addHandler(file_handler)

    http_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    logger.propagate = False

    return logger


def configure_logging(config: "Config") -> logging.Logger:
    """Set up logging from the log settings of a Config."""
    return setup_logging(config.log_file, config.log_level, json_logs=config.log_json)


def get_logger() -> logging.Logger:
    """Get the package logger instance."""
    return logging.getLogger(LOGGER_NAME)
