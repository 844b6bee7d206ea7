"""
Structured logging for the fmdata client.

Configures structlog on top of the standard library ``logging`` module and
hands out bound loggers. Record calls bind ``operation`` and ``layout`` into
the context so every log line emitted while a request is in flight carries
them. Lines go to stderr; stdout belongs to the CLI's JSON output.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True, service="fmdata")
            ↓
        structlog processor chain:
          1. filter_by_level          (level of the "fmdata" stdlib logger)
          2. merge_contextvars        (operation, layout, record_id)
          3. add_log_level / add_logger_name
          4. TimeStamper(fmt="iso")
          5. mask_secrets             (password, token, Authorization)
          6. service metadata
          7. JSONRenderer (ECS field names) or ConsoleRenderer
            ↓
        logging.getLogger("fmdata") ──► stderr

Examples:
    >>> from fmdata.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", service="fmdata")
    >>> logger = get_logger(__name__)
    >>> logger.debug("record_created", layout="Heroes", record_id="147")

Guardrails:
    ❌ DON'T: Log credentials or the session token in clear text
    ✅ DO: Let ``mask_secrets`` redact them before rendering

Tags:
    logging, structlog, observability, fmdata

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from fmdata.core.errors import ConfigError

ROOT_LOGGER = "fmdata"
MASK = "***"
SECRET_KEYS: frozenset[str] = frozenset(
    {"password", "token", "authorization", "x-fm-data-access-token"}
)


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is when a record is emitted."""

    def __init__(self, level: int = logging.NOTSET):
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        return sys.stderr


def mask_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace credential values with ``***``, including inside header dicts."""
    for key, value in list(event_dict.items()):
        if key.lower() in SECRET_KEYS and value is not None:
            event_dict[key] = MASK
        elif isinstance(value, dict):
            event_dict[key] = {
                k: MASK if isinstance(k, str) and k.lower() in SECRET_KEYS else v
                for k, v in value.items()
            }
    return event_dict


def _service_metadata(service: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Rename timestamp/level to their ECS field names."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def _parse_level(level: str) -> int:
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        raise ConfigError(f"Unknown log level: {level!r}")
    return numeric


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "fmdata",
) -> None:
    """Configure structured logging for the client.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: True for JSON, False for console, None for auto (JSON
            unless stderr is a tty)
        service: Service name to include in logs

    Raises:
        ConfigError: ``level`` is not a logging level name.
    """
    numeric_level = _parse_level(level)
    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        mask_secrets,
        _service_metadata(service),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            _elasticsearch_compatible,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    handler = _StderrHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger(ROOT_LOGGER)
    root.handlers[:] = [handler]
    root.setLevel(numeric_level)
    root.propagate = False

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Scoped logging context, usable with ``with`` and ``async with``.

    Example:
        async with LogContext(operation="edit", layout="Heroes"):
            logger.info("request_sent")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *args) -> None:
        self.__exit__(*args)


__all__ = [
    "LogContext",
    "MASK",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "mask_secrets",
    "unbind_context",
]
