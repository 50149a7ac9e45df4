# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Structured Logging
JSON logs via structlog, or a coloured console at DEBUG. Render and capture
entries carry the device and, while a capture runs, its session_id.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from screenframe.config import get_settings

SERVICE_NAME = "screenframe"


def _tag_service(logger: Any, method: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("app", SERVICE_NAME)
    return event_dict


def _strip_uvicorn_noise(logger: Any, method: str, event_dict: EventDict) -> EventDict:
    # uvicorn duplicates every access line as an ANSI-coloured copy
    event_dict.pop("color_message", None)
    return event_dict


def _renderers(debug: bool) -> list[Processor]:
    if debug:
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]


def configure_logging() -> None:
    """
    Install the structlog pipeline and route stdlib logging (uvicorn,
    fastapi) to stdout at the same level. Called once from the app lifespan.
    """
    level_name = get_settings().log_level
    level = logging.getLevelName(level_name)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _tag_service,
        _strip_uvicorn_noise,
        *_renderers(level_name == "DEBUG"),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def get_logger(name: str = SERVICE_NAME) -> structlog.BoundLogger:
    """
    Return a structlog bound logger.

        log = get_logger(__name__)
        log.info("variant_rendered", device="IPHONE", size_bytes=48213)

    A capture binds its session for the duration of the fan-out:
        structlog.contextvars.bind_contextvars(session_id=session_id)
        ...
        structlog.contextvars.unbind_contextvars("session_id")
    """
    return structlog.get_logger(name)
