"""structlog setup for the whenItDropped server and lookup CLI.

Both entry points call :func:`configure_logging` once at start-up:

- ``src.main`` logs to stdout, rendering JSON when ``APP_ENV`` is
  ``production`` and coloured console lines otherwise.
- ``src.cli.lookup`` passes ``stream=sys.stderr`` so log lines never mix
  with the panels it prints on stdout (its ``--json`` mode emits one JSON
  object per line there).

Events carry ``session_id`` explicitly.  The exploration WebSocket binds a
``connection_id`` with ``structlog.contextvars``, which
``merge_contextvars`` adds to every event logged while serving that client,
including those from panel tasks spawned on its behalf.

Standard-library loggers (uvicorn, httpx) are routed through the same
renderer.  httpx and httpcore are held at WARNING because they log every
provider request at INFO, and one date session makes dozens.
"""

import logging
import os
import sys
from typing import TextIO

import structlog

_CHATTY_LIBRARY_LOGGERS = ("httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.
        json_output: Force JSON lines regardless of ``APP_ENV``.
        stream: Where log lines go. Defaults to ``sys.stdout``; the CLI
            passes ``sys.stderr``.

    Returns:
        A configured structlog BoundLogger.
    """
    level = log_level.upper()
    out = stream or sys.stdout
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"

    renderer: structlog.types.Processor
    if use_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[*_shared_processors(), renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_shared_processors(),
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _CHATTY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound to *name*, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
