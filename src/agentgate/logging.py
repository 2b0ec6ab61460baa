"""structlog setup for hook processes.

The hook runtime reads decisions from stdout and exit codes, so logs always go
to stderr. Module loggers stay plain ``logging.getLogger(__name__)``; structlog
only formats them.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_PACKAGE_PREFIX = "agentgate."


def _add_component(
    _logger: Any, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Shorten ``agentgate.policy.ownership`` to ``component=policy.ownership``."""
    name = event_dict.pop("logger", "")
    if isinstance(name, str) and name.startswith(_PACKAGE_PREFIX):
        name = name[len(_PACKAGE_PREFIX) :]
    if name:
        event_dict["component"] = name
    return event_dict


def _wants_json(json_output: bool | None) -> bool:
    if json_output is not None:
        return json_output
    from agentgate.config import get_settings

    return get_settings().app_env == "prod"


def configure_logging(level: str, json_output: bool | None = None) -> None:
    """Route stdlib and structlog records through one stderr handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR); unknown names fall back to WARNING.
        json_output: Force JSON lines. If None, JSON is used when APP_ENV is prod.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_component,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer: structlog.types.Processor
    if _wants_json(json_output):
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)


def bind_context(**kwargs: object) -> None:
    """Attach session and agent identifiers to every record logged for this decision."""
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in kwargs.items() if value not in (None, "")}
    )


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
