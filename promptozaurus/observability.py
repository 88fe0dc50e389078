"""
Observability — structlog configuration

Modules log through structlog.get_logger(__name__). Importing the package
installs a quiet default: warnings and errors only, written to stderr.
setup_logging() replaces it and routes events through the standard library
at the configured level. Logs never go to stdout, so compiled prompts stay clean.
"""

import logging
import sys
from typing import Any, Dict

import structlog

from . import __version__


def configure_default_logging() -> None:
    """Warnings and errors to stderr, unless structlog is already configured."""
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def setup_logging(log_level: str = "WARNING", log_format: str = "console") -> None:
    """
    Configure structured logging.

    Args:
        log_level: Standard level name (DEBUG, INFO, WARNING, ...)
        log_format: "json" for machine-readable lines, anything else for console
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.WARNING),
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_app_context,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def add_app_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Stamp every entry with the application version and any bound project."""
    event_dict.setdefault("version", __version__)
    project = structlog.contextvars.get_contextvars().get("project")
    if project:
        event_dict["project"] = project
    return event_dict


def bind_project(name: str) -> None:
    """Attach a project name to all subsequent log entries."""
    structlog.contextvars.bind_contextvars(project=name)
