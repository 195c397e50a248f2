"""Tests for queued structured logging setup."""

from __future__ import annotations

import logging
from logging.handlers import QueueHandler

import structlog

from vyb.logger import setup_logging, stop_logging


def test_logging_writes_through_queue() -> None:
    setup_logging(service="test-vyb", level="info")
    logging.getLogger("test_queue").info("hello from queue test")
    structlog.get_logger("test_structlog").info("structured event", items=3)
    stop_logging()


def test_stop_logging_idempotent() -> None:
    setup_logging(service="test-vyb", level="debug")
    logging.getLogger("test_flush").info("flush test message")
    stop_logging()
    stop_logging()


def test_setup_logging_twice_replaces_listener() -> None:
    setup_logging(service="first")
    setup_logging(service="second")
    stop_logging()


def test_stop_logging_detaches_queue_handler() -> None:
    setup_logging(service="test-vyb")
    root = logging.getLogger()
    assert any(isinstance(h, QueueHandler) for h in root.handlers)
    stop_logging()
    assert not any(isinstance(h, QueueHandler) for h in root.handlers)
