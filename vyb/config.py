"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from vyb import constants


@dataclass(frozen=True)
class ContextSettings:
    """Capacity and scoring knobs for the context memory manager.

    Fixed at construction; changing the environment afterwards has no effect
    on an already-built manager.
    """

    max_immediate_items: int = constants.MAX_IMMEDIATE_ITEMS
    max_short_term_items: int = constants.MAX_SHORT_TERM_ITEMS
    compression_ratio: float = constants.COMPRESSION_RATIO
    relevance_threshold: float = constants.RELEVANCE_THRESHOLD


class Settings:
    """Configuration for the vyb runtime, loaded from environment variables.

    Prefix: VYB_ for logging, VYB_CONTEXT_ for the context memory.
    """

    log_level: str
    log_service: str
    context: ContextSettings

    def __init__(self) -> None:
        self.log_level = os.environ.get("VYB_LOG_LEVEL", "info")
        self.log_service = os.environ.get("VYB_LOG_SERVICE", "vyb")
        self.context = ContextSettings(
            max_immediate_items=int(
                os.environ.get("VYB_CONTEXT_MAX_IMMEDIATE", str(constants.MAX_IMMEDIATE_ITEMS)),
            ),
            max_short_term_items=int(
                os.environ.get("VYB_CONTEXT_MAX_SHORT_TERM", str(constants.MAX_SHORT_TERM_ITEMS)),
            ),
            compression_ratio=float(
                os.environ.get("VYB_CONTEXT_COMPRESSION_RATIO", str(constants.COMPRESSION_RATIO)),
            ),
            relevance_threshold=float(
                os.environ.get("VYB_CONTEXT_RELEVANCE_THRESHOLD", str(constants.RELEVANCE_THRESHOLD)),
            ),
        )


def load_settings() -> Settings:
    """Read settings from the current environment."""
    return Settings()
