from __future__ import annotations

import atexit
import copy
import logging
import queue
import sys
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Optional

import structlog

from indexarr.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

_LIBRARY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")

_listener: Optional[QueueListener] = None


def _stamp_foreign_record(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Timestamp stdlib records with their creation time, not their emission time."""
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = created.isoformat().replace("+00:00", "Z")
    return event_dict


def _formatter(config: AppConfig) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.typing.Processor
    if config.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            _stamp_foreign_record,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


class EventDictQueueHandler(QueueHandler):
    """Enqueue records untouched.

    The stock prepare() renders record.msg to a string, which would destroy the
    event dict that ProcessorFormatter renders on the listener thread.
    """

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        return copy.copy(record)


def shutdown_logging() -> None:
    """Flush and stop the background emitter, if one is running."""
    global _listener
    listener, _listener = _listener, None
    if listener is not None:
        listener.stop()


def _install_queue(config: AppConfig) -> None:
    global _listener
    shutdown_logging()

    # stdout carries command output, so every record goes to stderr.
    sink = logging.StreamHandler(stream=sys.stderr)
    sink.setFormatter(_formatter(config))

    records: queue.Queue[logging.LogRecord] = queue.Queue()
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(EventDictQueueHandler(records))
    root.setLevel(config.log_level)

    quietest = max(logging.getLevelName(config.log_level), logging.WARNING)
    for name in _LIBRARY_LOGGERS:
        library = logging.getLogger(name)
        library.handlers.clear()
        library.propagate = True
        library.setLevel(quietest)

    _listener = QueueListener(records, sink)
    _listener.start()


def configure_logging(config: AppConfig) -> None:
    """
    Send structlog and stdlib records through one pipeline.

    Records are queued on the calling thread and rendered on a listener
    thread, so code running on the event loop never waits on stderr.
    Calling this again replaces the previous setup.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _install_queue(config)
    atexit.register(shutdown_logging)
    log.debug("logging_configured", log_format=config.log_format, log_level=config.log_level)
