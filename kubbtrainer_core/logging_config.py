"""Logging setup for applications embedding the Kubb trainer core.

Library modules only call ``logging.getLogger(__name__)``; the host
application calls ``setup_logging`` once at startup.
"""
from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Any

DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "kubb_trainer.log"


def setup_logging(
    level: str = "INFO",
    log_dir: str | Path = "logs",
    enable_console: bool = True,
    enable_file: bool = False,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    format_style: str = "simple",
) -> None:
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if enable_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path / LOG_FILENAME,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        log_format = DETAILED_FORMAT if format_style == "detailed" else SIMPLE_FORMAT
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    root_logger.info("Logging initialized - Level: %s, Console: %s, File: %s", level, enable_console, enable_file)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_exception(
    logger: logging.Logger,
    exception: BaseException,
    context: dict[str, Any] | None = None,
    level: str = "ERROR",
) -> None:
    context_str = ""
    if context:
        context_str = " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"
    logger.log(
        getattr(logging, level.upper(), logging.ERROR),
        "Exception occurred%s: %s: %s",
        context_str,
        type(exception).__name__,
        exception,
        exc_info=(type(exception), exception, exception.__traceback__),
    )
