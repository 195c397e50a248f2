"""Structured JSON logging for the vyb runtime.

Log schema:
  {timestamp, level, logger, service, event, ...bound fields}
"""

from __future__ import annotations

import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener

import structlog

_listener: QueueListener | None = None
_queue_handler: QueueHandler | None = None


def setup_logging(service: str = "vyb", level: str = "info") -> None:
    """Configure structlog with queued JSON output.

    Call once at startup, before any logging. Calling again replaces the
    previous listener.
    """
    global _listener, _queue_handler
    log_level = getattr(logging, level.upper(), logging.INFO)

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=10_000)
    # stderr keeps stdout free for the interactive session
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(log_level)

    stop_logging()
    _listener = QueueListener(log_queue, stream_handler, respect_handler_level=True)
    _listener.start()

    _queue_handler = QueueHandler(log_queue)
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_queue_handler)
    root.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _add_service(service),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def stop_logging() -> None:
    """Flush and stop the log listener. Safe to call more than once.

    Also detaches the queue handler so later records are not buffered into a
    queue nobody drains.
    """
    global _listener, _queue_handler
    if _listener is not None:
        _listener.stop()
        _listener = None
    if _queue_handler is not None:
        logging.getLogger().removeHandler(_queue_handler)
        _queue_handler = None


def _add_service(service: str) -> structlog.types.Processor:
    """Return a processor that stamps the service name on every entry."""

    def processor(
        _logger: structlog.types.WrappedLogger,
        _method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        event_dict["service"] = service
        return event_dict

    return processor
