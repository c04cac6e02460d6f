"""Logging configuration for the checkout domain.

structlog sits on top of stdlib logging so library output (Protean,
uvicorn) and checkout events share the same handlers. Every event carries
``service="checkout"``; per-attempt fields such as ``user_id`` are bound with
``checkout_log_context()``.

Environment:
    LOG_LEVEL    explicit level, overrides the per-environment default
    LOG_FORMAT   ``json`` or ``console``; defaults to json in production/staging
    LOG_DIR      directory for rotating log files (default ``logs``)
    LOG_TO_FILE  set to ``0``/``false`` to log to stdout only (off by default under test)
"""

import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from pathlib import Path

import structlog

SERVICE_NAME = "checkout"

_LEVEL_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_MAX_LOG_BYTES = 10 * 1024 * 1024


def current_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Get log level based on environment."""
    return os.getenv("LOG_LEVEL", _LEVEL_BY_ENV.get(current_environment(), "INFO")).upper()


def _file_logging_enabled() -> bool:
    flag = os.getenv("LOG_TO_FILE")
    if flag is None:
        return current_environment() != "test"
    return flag.lower() not in ("0", "false", "no")


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def build_handlers(log_level: str) -> list[logging.Handler]:
    """Stdout handler, plus checkout.log and checkout_error.log when file logging is on."""
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    handlers = [console_handler]

    if _file_logging_enabled():
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_handler(log_dir / f"{SERVICE_NAME}.log", log_level))
        handlers.append(_rotating_handler(log_dir / f"{SERVICE_NAME}_error.log", logging.ERROR))

    return handlers


def setup_stdlib_logging() -> None:
    log_level = get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = build_handlers(log_level)

    logging.getLogger("protean").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def add_service_name(logger, method_name, event_dict):
    """structlog processor tagging every event with the service name."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def select_renderer():
    fmt = os.getenv("LOG_FORMAT")
    if fmt is None:
        fmt = "json" if current_environment() in ("production", "staging") else "console"

    if fmt.lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_service_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            select_renderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging()
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def checkout_log_context(**fields):
    """Bind ``fields`` to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**{key: str(value) for key, value in fields.items()}):
        yield
