"""
structlog setup for the Taskmaster server.

``create_app`` calls ``configure_logging`` with the values from ``Settings``,
so the same output format applies under ``taskmaster`` (the CLI) and under
``uvicorn --factory taskmaster.main:create_app``.
"""

from __future__ import annotations

import logging

import structlog


def _renderer(fmt: str):
    if fmt == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer()]


def configure_logging(level: str = "info", fmt: str = "text") -> None:
    """Route structlog (and the stdlib loggers used by uvicorn) to stdout at ``level``."""
    numeric_level = structlog.processors.NAME_TO_LEVEL[level.lower()]
    logging.basicConfig(format="%(message)s", level=numeric_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *_renderer(fmt),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
