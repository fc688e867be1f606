"""Logging configuration for the analysis engine."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import (
    CallsiteParameter,
    CallsiteParameterAdder,
    TimeStamper,
    add_log_level,
    dict_tracebacks,
    format_exc_info,
)
from structlog.stdlib import (
    ProcessorFormatter,
    add_logger_name,
    filter_by_level,
    render_to_log_kwargs,
)

from storybook.config.settings import StorybookSettings

_FOREIGN_PRE_CHAIN: list[Any] = [
    TimeStamper(fmt="iso"),
    add_log_level,
    add_logger_name,
]


def _build_formatter(log_format: str) -> ProcessorFormatter:
    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    elif log_format == "structured":
        renderer = structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event"],
            drop_missing=True,
        )
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return ProcessorFormatter(processor=renderer, foreign_pre_chain=_FOREIGN_PRE_CHAIN)


def configure_logging(settings: StorybookSettings) -> None:
    """Configure stdlib logging and structlog from settings.

    Log records always go to stderr so that stdout stays clean for JSON
    results and for the stdio MCP transport.

    Args:
        settings: Application settings containing logging configuration.

    Raises:
        ValueError: If the log level is not a logging module level name.
    """
    level_name = settings.log_level.upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        valid = ["CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING"]
        raise ValueError(
            f"Invalid log level '{settings.log_level}'. "
            f"Valid levels are: {', '.join(valid)}"
        )

    formatter = _build_formatter(settings.log_format)
    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(log_path),
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)
    logging.getLogger().setLevel(log_level)

    processors: list[Any] = [
        merge_contextvars,
        filter_by_level,
        TimeStamper(fmt="iso"),
        add_log_level,
        dict_tracebacks,
    ]
    if settings.debug:
        processors.append(
            CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.FILENAME,
                    CallsiteParameter.LINENO,
                    CallsiteParameter.FUNC_NAME,
                ]
            )
        )

    # pytest's caplog only sees records that went through the stdlib formatter
    in_pytest = "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ
    if settings.log_format in {"json", "structured"} or in_pytest:
        processors.extend(
            [
                format_exc_info,
                render_to_log_kwargs,
                ProcessorFormatter.wrap_for_formatter,
            ]
        )
    else:
        processors.extend(
            [
                format_exc_info,
                structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            ]
        )

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a structlog logger by name (usually __name__)."""
    return structlog.get_logger(name)
