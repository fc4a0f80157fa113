"""Logging for the marketplace domain.

Records go through structlog into the stdlib root logger, which writes to
stdout and to two rotating files under ``LOG_DIR``: ``marketplace.log`` for
everything at the configured level and ``marketplace_error.log`` for errors.
Production renders JSON lines; other environments get a colored console
renderer with Rich tracebacks.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

import structlog

from marketplace.utils import settings

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_MAX_BYTES = 10 * 1024 * 1024
_BACKUPS = 5

# Libraries that are chatty at DEBUG
_QUIET = ("protean", "sqlalchemy.engine", "urllib3", "asyncio")


def log_level(environment=None):
    """Level name for ``environment``; ``LOG_LEVEL`` wins when set."""
    if settings.LOG_LEVEL:
        return settings.LOG_LEVEL.upper()
    return _LEVELS.get(environment or settings.ENVIRONMENT, "INFO")


def _rotating(path, level):
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def _configure_handlers(level, log_dir):
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        console,
        _rotating(log_dir / "marketplace.log", level),
        _rotating(log_dir / "marketplace_error.log", logging.ERROR),
    ]

    for name in _QUIET:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer(environment):
    if environment in ("production", "staging"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=True, max_frames=2),
    )


def configure_logging(environment=None, log_dir=None):
    environment = environment or settings.ENVIRONMENT
    _configure_handlers(log_level(environment), log_dir or settings.LOG_DIR)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            _renderer(environment),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
