"""Structured logging for the release manager.

Every event is a snake_case name plus keyword context. The events emitted
by this package are:

- ``github_request`` (debug) / ``github_request_failed`` (warning):
  one per GitHub REST call, with ``method``, ``url`` and, on failure,
  ``status_code`` and GitHub's ``message``
- ``batch_info_started`` / ``batch_info_complete`` / ``batch_info_failed``
- ``rc_creation_started`` / ``rc_creation_complete`` / ``rc_creation_failed``,
  with ``rc_branch`` and ``rc_release_tag``
- ``http_request`` and ``service_started`` from the HTTP service

Output goes to stderr so the CLI can print its JSON result on stdout.
``production`` renders JSON lines; any other environment renders
colourised console output.

Usage:
    from release_manager.logging_config import setup_logging, get_logger

    setup_logging(environment="production")
    logger = get_logger(__name__).bind(repo="myorg/api")
    logger.info("rc_creation_started", rc_branch="rc/1.3.0")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

PRODUCTION = "production"


def _renderer(environment: str) -> Any:
    if environment == PRODUCTION:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(
    environment: str | None = None,
    log_level: str | None = None,
) -> None:
    """Configure structlog (and stdlib logging for httpx/uvicorn).

    Args:
        environment: "development" or "production"; defaults to $ENVIRONMENT
        log_level: DEBUG, INFO, WARNING or ERROR; defaults to $LOG_LEVEL, then INFO.
                   DEBUG turns on the per-request ``github_request`` events.
    """
    env = environment or os.environ.get("ENVIRONMENT", "development")
    level_name = (log_level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(env),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)


def get_logger(name: str) -> Any:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)
