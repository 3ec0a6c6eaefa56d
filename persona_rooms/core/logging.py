"""Structured logging for the room orchestration core.

Every module logs events through ``get_logger(__name__)``:

    logger.info("room_created", room_id=..., scope_id=...)

While an orchestration run is in progress, ``room_log_context`` binds the
room and scope ids as context variables, so every event emitted during the
run (selection, handover, membership, generation failures) carries them
without each call site passing them. Context variables are task-local:
concurrent runs on different rooms never see each other's ids.

``configure_logging`` is called once by the entry point
(``python -m persona_rooms``); library users call it themselves or plug
the package into their own structlog configuration. Events are written to
stderr so stdout stays free for command output.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.typing import EventDict, FilteringBoundLogger, Processor

from persona_rooms.core.config import Settings, get_settings


_JSON_ENVIRONMENTS = frozenset({"production", "staging"})
_NOISY_LOGGERS = ("httpx", "httpcore")


class ServiceContext:
    """Processor stamping the service name and environment on each event."""

    def __init__(self, settings: Settings) -> None:
        self.service = settings.service_name
        self.environment = settings.environment

    def __call__(self, logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", self.service)
        event_dict.setdefault("environment", self.environment)
        return event_dict


def _renderer(settings: Settings) -> Processor:
    if settings.environment in _JSON_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def build_processors(settings: Settings) -> list[Processor]:
    """Processor chain: room context, level, timestamp, service, renderer."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        ServiceContext(settings),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.environment in _JSON_ENVIRONMENTS:
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(settings))
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for the process.

    Args:
        settings: Source of log level, service name and environment.
            Uses get_settings() if not provided.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    # The HTTP generation client logs every request at INFO
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def room_log_context(room_id: str, scope_id: str) -> Iterator[None]:
    """Bind ``room_id`` and ``scope_id`` to every event logged inside the block.

    Previously bound values are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(room_id=room_id, scope_id=scope_id):
        yield


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a structured logger for ``name`` (the module name)."""
    return structlog.get_logger(name)


__all__ = [
    "ServiceContext",
    "build_processors",
    "configure_logging",
    "get_logger",
    "room_log_context",
]
