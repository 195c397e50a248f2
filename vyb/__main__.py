"""Entry point: feed session turns from stdin into a fresh context memory.

Each non-blank input line is recorded as a user turn; on EOF the memory
statistics are written to stdout as JSON.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

import structlog

from vyb.config import Settings, load_settings
from vyb.contextmanager import SmartContextManager
from vyb.logger import setup_logging, stop_logging
from vyb.session import SessionContext

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = structlog.get_logger()


def create_session(session_id: str, settings: Settings | None = None) -> SessionContext:
    """Build a SessionContext over a manager configured from the environment.

    Configures logging as a side effect; pair with ``stop_logging()``.
    """
    settings = settings or load_settings()
    setup_logging(service=settings.log_service, level=settings.log_level)

    manager = SmartContextManager(settings.context)
    logger.info(
        "context memory ready",
        session_id=session_id,
        max_immediate_items=settings.context.max_immediate_items,
        max_short_term_items=settings.context.max_short_term_items,
    )
    return SessionContext(manager, session_id)


def main(lines: Iterable[str] | None = None, out: TextIO | None = None) -> int:
    """Record *lines* (stdin by default) and print the resulting stats."""
    out = out or sys.stdout
    session = create_session(f"cli_{os.getpid()}")
    try:
        for line in sys.stdin if lines is None else lines:
            text = line.strip()
            if text:
                session.record_user_input(text)
        out.write(session.manager.get_stats().model_dump_json(indent=2) + "\n")
    finally:
        stop_logging()
    return 0


if __name__ == "__main__":
    sys.exit(main())
