"""Structured logging setup for the dependency tracker.

structlog events are rendered by a processor chain and handed to the
standard library logging module, which writes them to stderr. Command output
on stdout therefore stays machine readable.

Every CLI run binds a run ID to the context, so all events of one check or
rebuild plan can be grouped together.

Example:
    >>> from src.log_config import bind_run_id, configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_logs=False)
    >>> bind_run_id()
    >>> get_logger(__name__).info("artifact_rebuilt", artifact_id="posts/hello.md")
"""

import logging
import sys
import uuid
from typing import Any

import structlog

RUN_ID_KEY = "run_id"


def _resolve_level(level: str) -> int:
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        msg = f"Invalid log level: {level}"
        raise ValueError(msg)
    return numeric_level


def _processor_chain(json_logs: bool) -> list[Any]:
    """Build the processors, ending with the renderer."""
    callsite = structlog.processors.CallsiteParameterAdder(
        parameters=[
            structlog.processors.CallsiteParameter.MODULE,
            structlog.processors.CallsiteParameter.FUNC_NAME,
            structlog.processors.CallsiteParameter.LINENO,
        ],
    )

    if json_logs:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    return [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        callsite,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog and the root stdlib logger.

    May be called more than once: the CLI configures logging early with a
    default level and again once the configuration file has been read.

    Args:
        level: Level name, case-insensitive (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render events as JSON lines; console rendering otherwise

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = _resolve_level(level)

    # basicConfig is a no-op once the root logger has handlers
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)
    logging.getLogger().setLevel(numeric_level)

    structlog.configure(
        processors=_processor_chain(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, usually for ``__name__``."""
    return structlog.get_logger(name)


def bind_run_id(run_id: str | None = None) -> str:
    """Attach a run ID to every subsequent event in the current context.

    Args:
        run_id: Identifier to bind; a random hex ID is generated when omitted

    Returns:
        The bound run ID
    """
    run_id = run_id or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(**{RUN_ID_KEY: run_id})
    return run_id


def unbind_run_id() -> None:
    structlog.contextvars.unbind_contextvars(RUN_ID_KEY)


def bind_context(**kwargs: Any) -> None:
    """Add key-value pairs (e.g. ``manifest="build.yaml"``) to the context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)
